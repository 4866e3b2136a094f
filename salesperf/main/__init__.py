from flask import Blueprint

bp = Blueprint('main', __name__)

# Import routes and forms at the bottom
from salesperf.main import routes, forms
