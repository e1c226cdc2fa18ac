"""
VR SHOW Quoting Service
Shared SQLAlchemy instance.

Models live in sibling modules and are imported by ``create_app`` so
``db.create_all()`` sees every table.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
