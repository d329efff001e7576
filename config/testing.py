from .config import db_config_from_env

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_database="hris_test_db")

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

DEFAULT_TIMEZONE = "Asia/Jakarta"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
