import matplotlib
from matplotlib.backends.backend_agg import FigureCanvasAgg as FigureCanvas
from matplotlib.figure import Figure

from history import daily_totals, sales_by_group, top_items


def _fill_colors(groups):
    """Use each group's own colour where it has one, pastel otherwise."""
    pastel = matplotlib.colormaps["Pastel1"].colors
    return [color or pastel[i % len(pastel)] for i, (_, _, color) in enumerate(groups)]


def draw_daily_sales(ax, history):
    totals = daily_totals(history)
    if totals:
        days = [d for d, _ in totals]
        amounts = [t for _, t in totals]
        ax.plot(days, amounts, marker='o', color='#1f77b4')
        ax.set_title('Daily Sales')
        ax.set_xlabel('Date')
        ax.set_ylabel('Total Sales')
        ax.tick_params(axis='x', rotation=45)
    else:
        ax.text(0.5, 0.5, 'No sales recorded', ha='center', va='center')
        ax.axis('off')


def draw_top_items(ax, history, limit=10):
    ranked = top_items(history, limit)
    if ranked:
        names = [name for name, _ in ranked]
        qtys = [qty for _, qty in ranked]
        ax.barh(list(reversed(names)), list(reversed(qtys)), color='#2ca02c')
        ax.set_title('Top Items (by quantity)')
        ax.set_xlabel('Quantity Sold')
    else:
        ax.text(0.5, 0.5, 'No items sold', ha='center', va='center')
        ax.axis('off')


def draw_contribution(ax, history):
    groups = sales_by_group(history)
    revenues = [amount for _, amount, _ in groups]
    if groups and sum(revenues) > 0:
        labels = [name for name, _, _ in groups]
        ax.pie(revenues, labels=labels, autopct='%1.1f%%', colors=_fill_colors(groups))
        ax.set_title('Revenue Contribution (by group)')
    else:
        ax.text(0.5, 0.5, 'No revenue data', ha='center', va='center')
        ax.axis('off')


def render_history_charts(history, path=None):
    """Build the three history charts side by side.

    Returns the matplotlib Figure. When `path` is given the figure is also
    written there as PNG.
    """
    fig = Figure(figsize=(15, 4.5))
    FigureCanvas(fig)
    draw_daily_sales(fig.add_subplot(131), history)
    draw_top_items(fig.add_subplot(132), history)
    draw_contribution(fig.add_subplot(133), history)
    fig.tight_layout()
    if path:
        fig.savefig(path, format='png')
    return fig
