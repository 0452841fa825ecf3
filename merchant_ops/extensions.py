"""
Flask extensions, bound to the app in create_app().
"""
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Shared by models, services and the webhook delivery pipeline
db = SQLAlchemy()

# Schema lives in migrations/versions (flask db upgrade)
migrate = Migrate()
