"""
Gunicorn entry point (`web:` in Procfile). `python wsgi.py` starts the Flask
dev server for poking at the results API locally.
"""
import os

from lead_engine import create_app

app = create_app()

if __name__ == '__main__':
    app.run(port=int(os.getenv('PORT', 5000)), debug=os.getenv('FLASK_DEBUG') == '1')
