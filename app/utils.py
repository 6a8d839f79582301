import string
import secrets
from datetime import datetime, timezone, timedelta

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def generate_random_id():
    digits = string.digits
    letters = string.ascii_uppercase
    letter_part = ''.join([secrets.choice(letters) for _ in range(2)])
    num_part = ''.join([secrets.choice(digits) for _ in range(8)])
    return f'{letter_part}-{num_part}'

def generate_admin_id():
    id = generate_random_id()
    return f'ADMIN-{id}'

def generate_user_id():
    id = generate_random_id()
    return f'USER-{id}'

def loan_due_date(approved_at: datetime, loan_period_days: int) -> datetime:
    return approved_at + timedelta(days=loan_period_days)
