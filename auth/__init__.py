# auth/__init__.py
from auth.models import User, LoginAttempt
from auth.schemas import AuthContext
from auth.security import verify_password, get_password_hash, create_access_token, decode_token
from auth.dependencies import get_auth_context, require_admin
