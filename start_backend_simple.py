#!/usr/bin/env python3
"""
Simple Backend Starter
Starts the Campus Events API with the project root on the import path
"""

import uvicorn
import os
import sys

if __name__ == "__main__":
    # Run from the project root so a local .env and sqlite file are found
    script_dir = os.path.dirname(os.path.abspath(__file__))
    os.chdir(script_dir)
    sys.path.insert(0, script_dir)

    port = int(os.getenv("PORT", "8000"))
    print(f"Starting Campus Events API from: {script_dir}")
    print(f"Server will be available at: http://localhost:{port}")
    print(f"API docs will be available at: http://localhost:{port}/docs")

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=True,
        reload_dirs=["./app"],  # Only watch the app directory
    )
