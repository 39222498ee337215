#!/usr/bin/env python3
"""
Main entry point for running the GigMarket reviews service
"""

from app.main import create_app
import os

if __name__ == '__main__':
    # Set environment
    os.environ.setdefault('FLASK_ENV', 'development')

    # Create and run app
    app = create_app()

    print("Starting GigMarket reviews service...")
    print("Access the API at: http://localhost:5001/api/reviews")
    print("\nPress CTRL+C to stop the server")

    app.run(
        host='0.0.0.0',
        port=5001,
        debug=True
    )
