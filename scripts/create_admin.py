"""Create an admin account, or promote an existing account to admin.

Run: python scripts/create_admin.py admin@example.com --name "Shop Admin"

When the email is not registered yet a password is required (prompted if
--password is omitted). Uses MONGO_URI / BCRYPT_LOG_ROUNDS from the
environment like the app does.
"""

import argparse
import getpass
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from flask_bcrypt import Bcrypt
from pymongo import MongoClient

from config import Config
from core.errors import ValidationError
from core.security import PasswordHasher
from repositories.user_repo import UserRepository
from schemas.user import Role
from services.auth_service import normalize_email
from utils.validators import validate_email, validate_password


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('email')
    parser.add_argument('--name', default='Admin')
    parser.add_argument('--password', default=None)
    args = parser.parse_args(argv)

    email = normalize_email(args.email)
    try:
        validate_email(email)
    except ValidationError as e:
        print(f'Error: {e.message}')
        return 2

    client = MongoClient(Config.MONGO_URI)
    try:
        repo = UserRepository(client.get_default_database(default='sweet_shop'))
        existing = repo.find_by_email(email)
        if existing:
            if existing.role is Role.ADMIN:
                print(f'{email} is already an admin.')
                return 0
            repo.set_role(email, Role.ADMIN)
            print(f'Promoted {email} to admin.')
            return 0

        password = args.password or getpass.getpass('Password for new admin: ')
        try:
            validate_password(password)
        except ValidationError as e:
            print(f'Error: {e.message}')
            return 2
        hasher = PasswordHasher(Bcrypt(), rounds=Config.BCRYPT_LOG_ROUNDS)
        user = repo.create(name=args.name, email=email, password_hash=hasher.hash(password), role=Role.ADMIN)
        print(f'Created admin {user.email} (id={user.id}).')
        return 0
    finally:
        client.close()


if __name__ == '__main__':
    sys.exit(main())
