# backend/wsgi.py
from myhouz import create_app

app = create_app()
