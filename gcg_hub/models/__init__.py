"""
GCG Document Hub
SQLAlchemy models package.

``db`` is the single Flask-SQLAlchemy handle shared by every model module;
the app factory binds it with ``db.init_app(app)``.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
