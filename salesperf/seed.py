import json
from datetime import date, datetime
from salesperf import db
from salesperf.models import (AppSetting, SalesTerritory, Customer, Product, Person, Employee,
                              SalesPerson, SalesOrderHeader, SalesOrderDetail)

DEFAULT_SETTINGS = {
    # key: [value, description, value_type]
    'COMMISSION_RATES': [json.dumps({
        'Vital Employee': 0.08,
        'Valuable Employee': 0.05,
        'Requires More Sales Training': 0.03
    }), 'Commission rate (and bonus share of total profit) per employee category (JSON)', 'json'],
    'VITAL_PROFIT_MULTIPLIER': ['2.0', 'Total profit must exceed the average times this value to be a Vital Employee', 'float'],
}

# --- Demonstration dataset ---
DEMO_TERRITORIES = [(1, 'Northwest'), (2, 'Southwest'), (3, 'Central')]

# (customer_id, territory_id)
DEMO_CUSTOMERS = [(11000, 1), (11001, 1), (11002, 2), (11003, 2), (11004, 3)]

# (product_id, name, standard_cost)
DEMO_PRODUCTS = [
    (707, 'Sport-100 Helmet, Red', 13.09),
    (712, 'AWC Logo Cap', 6.92),
    (749, 'Road-150 Red, 62', 2171.29),
    (771, 'Mountain-100 Silver, 38', 1912.15),
]

# (business_entity_id, first_name, last_name, hire_date, sales_quota)
DEMO_SALESPEOPLE = [
    (275, 'Michael', 'Blythe', date(2011, 5, 31), 300000.0),
    (276, 'Linda', 'Mitchell', date(2011, 5, 31), 250000.0),
    (277, 'Jillian', 'Carson', date(2011, 5, 31), 250000.0),
]

# (sales_order_id, order_date, customer_id, sales_person_id, [(line_id, product_id, qty, line_total)])
DEMO_ORDERS = [
    (43659, datetime(2011, 5, 31), 11000, 275, [(1, 771, 1, 2024.99), (2, 712, 2, 10.37)]),
    (43660, datetime(2011, 6, 15), 11002, 276, [(1, 749, 1, 3578.27)]),
    (43661, datetime(2011, 7, 1), 11004, 277, [(1, 707, 6, 120.71), (2, 712, 0, 0.0)]),
    (51131, datetime(2012, 3, 2), 11001, 275, [(1, 749, 2, 7156.54)]),
    (51132, datetime(2012, 4, 9), 11003, 276, [(1, 771, 2, 4049.98), (2, 707, 3, 60.35)]),
    (51133, datetime(2012, 5, 20), 11004, 277, [(1, 749, 1, 2000.00)]),
]

def seed_data():
    """Populates the database with default settings."""
    for key, data in DEFAULT_SETTINGS.items():
        setting = AppSetting.query.filter_by(key=key).first()
        if not setting: # Only add if it doesn't exist
            setting = AppSetting(key=key, value=data[0], description=data[1], value_type=data[2])
            db.session.add(setting)
            print(f'Seeding setting: {key}')

    db.session.commit()
    # Force the engine to pick up the new settings on its next run
    from salesperf.analytics.engine import CalculationConfig
    CalculationConfig._instance = None
    print('Seeding complete.')

def seed_demo_sales():
    """Loads a small sales dataset so the report can be tried out. Skipped if orders exist."""
    if SalesOrderHeader.query.count() > 0:
        print('Sales orders already present, skipping demo data.')
        return

    print('Seeding demo sales data...')
    for territory_id, name in DEMO_TERRITORIES:
        db.session.add(SalesTerritory(territory_id=territory_id, name=name))
    for customer_id, territory_id in DEMO_CUSTOMERS:
        db.session.add(Customer(customer_id=customer_id, territory_id=territory_id))
    for product_id, name, cost in DEMO_PRODUCTS:
        db.session.add(Product(product_id=product_id, name=name, standard_cost=cost))
    for entity_id, first, last, hired, quota in DEMO_SALESPEOPLE:
        db.session.add(Person(business_entity_id=entity_id, first_name=first, last_name=last))
        db.session.add(Employee(business_entity_id=entity_id, hire_date=hired))
        db.session.add(SalesPerson(business_entity_id=entity_id, sales_quota=quota))

    for order_id, order_date, customer_id, sales_person_id, lines in DEMO_ORDERS:
        db.session.add(SalesOrderHeader(sales_order_id=order_id, order_date=order_date,
                                        customer_id=customer_id, sales_person_id=sales_person_id))
        for line_id, product_id, qty, line_total in lines:
            db.session.add(SalesOrderDetail(sales_order_id=order_id, sales_order_detail_id=line_id,
                                            product_id=product_id, order_qty=qty, line_total=line_total))

    db.session.commit()
    print('Demo sales data seeded.')
