# src/nodemeta/core/config.py

import logging
import os

from dotenv import load_dotenv

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

_TRUTHY = ("true", "1", "t", "y", "yes")


class Config:
    """
    Handles the application's configuration by loading values from environment variables.
    """

    def __init__(self):
        # --- Static metadata overrides ---
        # When all three are set, discovery against the instance metadata
        # service is skipped entirely.
        self.EKS_REGION = os.getenv("EKS_REGION") or None
        self.EKS_ACCOUNT_ID = os.getenv("EKS_ACCOUNT_ID") or None
        self.EKS_CLUSTER_NAME = os.getenv("EKS_CLUSTER_NAME") or None

        # --- Instance metadata service ---
        self.IMDS_ENDPOINT = os.getenv("AWS_EC2_METADATA_SERVICE_ENDPOINT", "http://169.254.169.254").rstrip("/")
        self.IMDS_TOKEN_TTL_SECONDS = int(os.getenv("IMDS_TOKEN_TTL_SECONDS", "21600"))
        self.DEFAULT_TIMEOUT_CONNECT = float(os.getenv("DEFAULT_TIMEOUT_CONNECT", "1.0"))
        self.DEFAULT_TIMEOUT_READ = float(os.getenv("DEFAULT_TIMEOUT_READ", "5.0"))

        # --- EC2 ---
        # A single attempt disables botocore's built-in retries; retrying is
        # left to the caller.
        self.EC2_MAX_ATTEMPTS = int(os.getenv("EC2_MAX_ATTEMPTS", "1"))
        self.VALIDATE_CREDENTIALS = os.getenv("VALIDATE_CREDENTIALS", "True").lower() in _TRUTHY

    # --- Logging variables ---
    @property
    def LOG_LEVEL(self) -> str:
        return os.getenv("LOG_LEVEL", "INFO")

    USER_AGENT = "nodemeta"

    @property
    def has_static_metadata(self) -> bool:
        return all((self.EKS_REGION, self.EKS_ACCOUNT_ID, self.EKS_CLUSTER_NAME))

    @property
    def has_partial_static_metadata(self) -> bool:
        overrides = (self.EKS_REGION, self.EKS_ACCOUNT_ID, self.EKS_CLUSTER_NAME)
        return any(overrides) and not all(overrides)

    def validate_instance(self):
        if self.DEFAULT_TIMEOUT_CONNECT <= 0 or self.DEFAULT_TIMEOUT_READ <= 0:
            raise ValueError("DEFAULT_TIMEOUT_CONNECT and DEFAULT_TIMEOUT_READ must be positive.")
        if self.IMDS_TOKEN_TTL_SECONDS <= 0 or self.IMDS_TOKEN_TTL_SECONDS > 21600:
            raise ValueError("IMDS_TOKEN_TTL_SECONDS must be between 1 and 21600.")
        if self.EC2_MAX_ATTEMPTS < 1:
            raise ValueError("EC2_MAX_ATTEMPTS must be at least 1.")

        if not self.VALIDATE_CREDENTIALS:
            logging.getLogger(__name__).warning("VALIDATE_CREDENTIALS is disabled; credential errors will surface lazily.")


# Instantiate the config to be imported by other modules
config = Config()
config.validate_instance()
