import sys
import os
import base64
from sqlalchemy.orm import Session

# Add the project root to the Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from secure_finance.db.core import Base, engine, session_local
from secure_finance.logging_config import setup_logging
from secure_finance.services.demo_data import seed_database


def main():
    """
    Create the schema and fill it with the colour palette and a few demo users.
    """
    setup_logging()
    Base.metadata.create_all(bind=engine)

    db: Session = session_local()
    try:
        created = seed_database(db, with_demo_users="--no-users" not in sys.argv)
        for username, plain_password, db_user in created:
            print(f"{username}: password '{plain_password}', "
                  f"Basic auth password {base64.b64encode(db_user.password).decode('ascii')}")
        print("Seeding complete.")
    except Exception as e:
        print(f"An error occurred: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
