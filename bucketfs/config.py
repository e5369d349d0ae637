import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from bucketfs.core.errors import ConfigurationError


def _load_dotenv() -> None:
    # Prefer the .env next to the package, then the cwd-based default
    env_path = Path(__file__).resolve().parent / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
    load_dotenv(find_dotenv(usecwd=True), override=False)


@dataclass(frozen=True)
class Config:
    # Bucket identity
    bucket_name: str
    bucket_host_name: str
    bucket_key_prefix: str = "media"

    # Storage client
    endpoint_url: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    region: str = "us-east-1"
    addressing_style: str = "virtual"
    delete_batch_size: int = 1000

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file_path: str | None = None

    def validate(self) -> None:
        if not self.bucket_name:
            raise ConfigurationError("BUCKET_NAME is required")

        if not self.bucket_host_name:
            raise ConfigurationError("BUCKET_HOST_NAME is required")

        if self.endpoint_url and not (
            self.endpoint_url.startswith("http://") or self.endpoint_url.startswith("https://")
        ):
            raise ConfigurationError("STORAGE_ENDPOINT_URL must start with 'http://' or 'https://'")

        if bool(self.access_key_id) != bool(self.secret_access_key):
            raise ConfigurationError(
                "STORAGE_ACCESS_KEY_ID and STORAGE_SECRET_ACCESS_KEY must be set together"
            )

        if self.addressing_style not in {"virtual", "path"}:
            raise ConfigurationError("STORAGE_ADDRESSING_STYLE must be 'virtual' or 'path'")

        if self.delete_batch_size < 1 or self.delete_batch_size > 1000:
            raise ConfigurationError("DELETE_BATCH_SIZE must be between 1 and 1000")

        if self.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ConfigurationError("LOG_LEVEL must be DEBUG, INFO, WARNING, ERROR, or CRITICAL")

        if self.log_format not in {"json", "text"}:
            raise ConfigurationError("LOG_FORMAT must be 'json' or 'text'")

        if self.log_file_path and not Path(self.log_file_path).parent.exists():
            raise ConfigurationError(f"LOG_FILE_PATH directory does not exist: {self.log_file_path}")

    def bucket_identity(self):
        from bucketfs.storage.models import BucketIdentity

        return BucketIdentity(
            bucket_name=self.bucket_name,
            host_name=self.bucket_host_name,
            key_prefix=self.bucket_key_prefix,
        )

    def create_client_factory(self):
        """
        Create the storage client factory.

        A single boto3 client is built and handed out for every request.
        """
        from bucketfs.storage.client import Boto3StorageClient

        client = Boto3StorageClient(
            endpoint_url=self.endpoint_url,
            access_key_id=self.access_key_id,
            secret_access_key=self.secret_access_key,
            region=self.region,
            addressing_style=self.addressing_style,
        )
        return lambda: client

    def create_file_system(self, client_factory=None):
        """
        Create the bucket file system described by this configuration.

        Args:
            client_factory: Storage client factory; defaults to a boto3 client

        Returns:
            BucketFileSystem instance
        """
        from bucketfs.storage.bucket_filesystem import BucketFileSystem

        return BucketFileSystem(
            identity=self.bucket_identity(),
            client_factory=client_factory or self.create_client_factory(),
            delete_batch_size=self.delete_batch_size,
        )


def _int_env(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


def load_config() -> Config:
    _load_dotenv()

    config = Config(
        bucket_name=os.environ.get("BUCKET_NAME", "").strip(),
        bucket_host_name=os.environ.get("BUCKET_HOST_NAME", "").strip(),
        bucket_key_prefix=os.environ.get("BUCKET_KEY_PREFIX", "media"),
        endpoint_url=os.environ.get("STORAGE_ENDPOINT_URL") or None,
        access_key_id=os.environ.get("STORAGE_ACCESS_KEY_ID") or None,
        secret_access_key=os.environ.get("STORAGE_SECRET_ACCESS_KEY") or None,
        region=os.environ.get("STORAGE_REGION", "us-east-1"),
        addressing_style=os.environ.get("STORAGE_ADDRESSING_STYLE", "virtual"),
        delete_batch_size=_int_env("DELETE_BATCH_SIZE", 1000),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_format=os.environ.get("LOG_FORMAT", "json"),
        log_file_path=os.environ.get("LOG_FILE_PATH") or None,
    )

    config.validate()
    return config
