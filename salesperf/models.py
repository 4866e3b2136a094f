# ==============================================================================
# salesperf/models.py
# ------------------------------------------------------------------------------
# Defines the database schema using SQLAlchemy ORM models.
# The sales tables are the source the performance report reads from; the
# report itself never writes to them.
# ==============================================================================

from salesperf import db
import json

class SalesTerritory(db.Model):
    """A sales region customers are assigned to."""
    __tablename__ = 'sales_territory'
    territory_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False, unique=True)

    customers = db.relationship('Customer', backref='territory', lazy='dynamic')

    def __repr__(self):
        return f'<SalesTerritory {self.territory_id}: {self.name}>'

class Customer(db.Model):
    __tablename__ = 'customer'
    customer_id = db.Column(db.Integer, primary_key=True)
    territory_id = db.Column(db.Integer, db.ForeignKey('sales_territory.territory_id'), nullable=False)

    def __repr__(self):
        return f'<Customer {self.customer_id}>'

class Product(db.Model):
    __tablename__ = 'product'
    product_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    standard_cost = db.Column(db.Float, nullable=False, default=0)

    def __repr__(self):
        return f'<Product {self.product_id}: {self.name}>'

class Person(db.Model):
    __tablename__ = 'person'
    business_entity_id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(64), nullable=False)
    last_name = db.Column(db.String(64), nullable=False)

    def __repr__(self):
        return f'<Person {self.business_entity_id}: {self.first_name} {self.last_name}>'

class Employee(db.Model):
    __tablename__ = 'employee'
    business_entity_id = db.Column(db.Integer, db.ForeignKey('person.business_entity_id'), primary_key=True)
    hire_date = db.Column(db.Date)

    person = db.relationship('Person', backref=db.backref('employee', uselist=False))

    def __repr__(self):
        return f'<Employee {self.business_entity_id}>'

class SalesPerson(db.Model):
    """
    An employee who sells. Only orders attributed to a salesperson take part
    in the performance report.
    """
    __tablename__ = 'sales_person'
    business_entity_id = db.Column(db.Integer, db.ForeignKey('employee.business_entity_id'), primary_key=True)
    sales_quota = db.Column(db.Float, nullable=True)

    employee = db.relationship('Employee', backref=db.backref('sales_person', uselist=False))

    def __repr__(self):
        return f'<SalesPerson {self.business_entity_id}>'

class SalesOrderHeader(db.Model):
    __tablename__ = 'sales_order_header'
    sales_order_id = db.Column(db.Integer, primary_key=True)
    order_date = db.Column(db.DateTime, nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customer.customer_id'), nullable=False)
    # Online orders carry no salesperson.
    sales_person_id = db.Column(db.Integer, db.ForeignKey('sales_person.business_entity_id'), nullable=True, index=True)

    # If an order is deleted, its lines go with it.
    details = db.relationship('SalesOrderDetail', backref='header', lazy='dynamic', cascade="all, delete-orphan")

    def __repr__(self):
        return f'<SalesOrderHeader {self.sales_order_id}>'

class SalesOrderDetail(db.Model):
    __tablename__ = 'sales_order_detail'
    sales_order_id = db.Column(db.Integer, db.ForeignKey('sales_order_header.sales_order_id'), primary_key=True)
    sales_order_detail_id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey('product.product_id'), nullable=False)
    order_qty = db.Column(db.Integer, nullable=False)
    line_total = db.Column(db.Float, nullable=False)

    def __repr__(self):
        return f'<SalesOrderDetail {self.sales_order_id}/{self.sales_order_detail_id}>'


class AppSetting(db.Model):
    """
    Stores key-value pairs for the business rules of the report (commission
    rates, the "vital" threshold multiplier) so they can be tuned without a
    code change.
    """
    __tablename__ = 'app_setting'
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(128), unique=True, nullable=False, index=True)
    value = db.Column(db.String(256), nullable=False)
    description = db.Column(db.String(512))
    value_type = db.Column(db.String(32), default='string') # e.g., 'float', 'int', 'string', 'json'

    def __repr__(self):
        return f'<AppSetting {self.key}: {self.value}>'

    def get_value(self):
        """Casts the string value to its correct Python type."""
        if self.value_type == 'float':
            return float(self.value)
        if self.value_type == 'int':
            return int(self.value)
        if self.value_type == 'json':
            return json.loads(self.value)
        return self.value
