"""
Discount usage statistics over completed orders.

Expects an orders DataFrame as exported by the order store, with at least
`applied_discount_class` and `discount_amount`. `monthly_breakdown` also
needs `order_date` and the per-rule breakdown columns.
"""
import pandas as pd

from ..engine.pricing import round_amount

CATEGORIES = ['vip', 'birthday', 'employee', 'package', 'regular']

BREAKDOWN_COLUMNS = ['vip_discount', 'birthday_discount', 'employee_discount', 'package_discount']


def _category(discount_class, discount_amount) -> str:
    cls = str(discount_class).strip().upper() if pd.notna(discount_class) and discount_class else 'REGULAR'
    if cls == 'VIP':
        return 'vip'
    if cls == 'BIRTHDAY':
        return 'birthday'
    if cls == 'EMPLOYEE':
        return 'employee'
    # A regular customer's discount can only come from a package
    if discount_amount > 0:
        return 'package'
    return 'regular'


def summarize_by_class(orders: pd.DataFrame) -> pd.DataFrame:
    """
    Count, total and average discount per category.

    Returns a DataFrame indexed by category (every category present, zeros
    where no orders matched) with columns count, total_discount, avg_discount.
    """
    empty = pd.DataFrame(
        {'count': 0, 'total_discount': 0.0, 'avg_discount': 0},
        index=pd.Index(CATEGORIES, name='category'),
    )
    if orders.empty:
        return empty

    amounts = pd.to_numeric(orders['discount_amount'], errors='coerce').fillna(0)
    classes = orders['applied_discount_class'] if 'applied_discount_class' in orders.columns \
        else pd.Series([None] * len(orders), index=orders.index)
    categories = [_category(c, a) for c, a in zip(classes, amounts)]

    frame = pd.DataFrame({'category': categories, 'discount_amount': amounts.values})
    grouped = frame.groupby('category')['discount_amount'].agg(['count', 'sum'])

    stats = empty.copy()
    stats.loc[grouped.index, 'count'] = grouped['count'].astype(int)
    stats.loc[grouped.index, 'total_discount'] = grouped['sum'].astype(float)
    stats['avg_discount'] = [
        round_amount(total / count) if count > 0 else 0
        for total, count in zip(stats['total_discount'], stats['count'])
    ]
    return stats


def monthly_breakdown(orders: pd.DataFrame) -> pd.DataFrame:
    """
    Per-month discount sums by rule plus total discount and order count.

    The month column is formatted YYYY-MM and sorted ascending.
    """
    columns = ['month'] + BREAKDOWN_COLUMNS + ['total_discount', 'total_orders']
    if orders.empty:
        return pd.DataFrame(columns=columns)

    frame = pd.DataFrame({
        'month': pd.to_datetime(orders['order_date']).dt.strftime('%Y-%m'),
    })
    for col in BREAKDOWN_COLUMNS:
        values = orders[col] if col in orders.columns else 0
        frame[col] = pd.to_numeric(values, errors='coerce')
        frame[col] = frame[col].fillna(0)
    frame['total_discount'] = pd.to_numeric(orders['discount_amount'], errors='coerce').fillna(0)

    monthly = frame.groupby('month').agg(
        **{col: (col, 'sum') for col in BREAKDOWN_COLUMNS},
        total_discount=('total_discount', 'sum'),
        total_orders=('total_discount', 'size'),
    ).reset_index()
    return monthly[columns].sort_values('month').reset_index(drop=True)
