# Production entry point
import os

from app import create_app
from utils.data_initializer import initialize_database

app = create_app()

# Seed reference data and the default admin before serving traffic
with app.app_context():
    initialize_database()

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    host = os.environ.get('HOST', '0.0.0.0')
    app.run(host=host, port=port, debug=False)
