import re

# backend endpoints
LOGIN_PATH = "/api/auth/login"
REGISTER_PATH = "/api/auth/register"
LOGOUT_PATH = "/api/auth/logout"
REFRESH_PATH = "/api/auth/refresh"
PROFILE_PATH = "/api/users/profile"

# token store keys
ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"

# input limits, shared with the backend validators
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 255

EMAIL_RE = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)
