"""
Vercel serverless function entry point for FastAPI
"""

import sys
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.main import app

# Vercel's Python runtime may look for either variable
handler = app
__all__ = ['handler', 'app']
