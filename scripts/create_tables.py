import asyncio
import os
import sys
from dotenv import load_dotenv

# STEP 1: Set up the Python path for imports
# ------------------------------------------
# Add the 'Backend' directory to the system path so we can import from the 'app' module.
backend_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'Backend'))
sys.path.append(backend_dir)

# STEP 2: Load environment variables
# ----------------------------------
# DATABASE_URL and SECRET_KEY come from the project root .env
project_root = os.path.dirname(backend_dir)
load_dotenv(os.path.join(project_root, ".env"))
print(" Environment loaded.")

# STEP 3: Import application modules (NOW that path and env are set)
# -----------------------------------------------------------------
from app.services.database import engine, init_models
print(" Application modules imported successfully.")

# --- Main Table Creation Logic ---
async def create_all_tables():
    """Connects to the database and creates every table of the models package."""
    print("\nConnecting to the database to create tables...")
    await init_models(engine)
    print(" All tables created successfully!")
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(create_all_tables())
