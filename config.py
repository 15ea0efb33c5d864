import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # Application settings
    app_name: str = os.getenv("APP_NAME", "Library Management System")

    # Persistence settings
    data_file: str = os.getenv("LIBRARY_DATA_FILE", "library_data.db")

    # Seed files, read only when no snapshot exists yet
    books_file: str = os.getenv("LIBRARY_BOOKS_FILE", "books.csv")
    borrowers_file: str = os.getenv("LIBRARY_BORROWERS_FILE", "borrowers.csv")

    # Output settings
    log_level: str = os.getenv("LOG_LEVEL", "WARNING").upper()
    output_mode: str = os.getenv("LIB_CLI_OUTPUT", "plain").lower()


settings = Settings()
