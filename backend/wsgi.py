# backend/wsgi.py
from police_training import create_app

app = create_app()
