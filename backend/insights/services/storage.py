# insights/services/storage.py
"""
Storage layer with local and cloud backends.
Set STORAGE_BACKEND env var to 'local' or 's3' to switch. The s3 backend
mirrors every write into a local cache that serves reads when S3 is down.
"""
import json
import logging
from pathlib import Path
from typing import Optional

from insights.config import AWS_REGION, DATA_DIR, S3_BUCKET, STORAGE_BACKEND

logger = logging.getLogger(__name__)


class StorageBackend:
    """Abstract storage interface"""

    def write_file(self, path: str, content: bytes) -> str:
        """Write file, return public URL or local path"""
        raise NotImplementedError

    def write_text(self, path: str, content: str) -> str:
        return self.write_file(path, content.encode('utf-8'))

    def write_json(self, path: str, data) -> str:
        content = json.dumps(data, ensure_ascii=False, indent=2)
        return self.write_text(path, content)

    def read_file(self, path: str) -> bytes:
        raise NotImplementedError

    def read_text(self, path: str) -> str:
        return self.read_file(path).decode('utf-8')

    def read_json(self, path: str):
        return json.loads(self.read_text(path))

    def exists(self, path: str) -> bool:
        raise NotImplementedError


class LocalStorage(StorageBackend):
    """Local filesystem storage"""

    def __init__(self, base_dir: str = "data"):
        self.base_dir = Path(base_dir)

    def _full_path(self, path: str) -> Path:
        return self.base_dir / path

    def write_file(self, path: str, content: bytes) -> str:
        full_path = self._full_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling then swap, so readers never see half a collection
        tmp_path = full_path.with_suffix(full_path.suffix + ".tmp")
        with open(tmp_path, 'wb') as f:
            f.write(content)
        tmp_path.replace(full_path)
        return str(full_path)

    def read_file(self, path: str) -> bytes:
        with open(self._full_path(path), 'rb') as f:
            return f.read()

    def exists(self, path: str) -> bool:
        return self._full_path(path).exists()


class S3Storage(StorageBackend):
    """AWS S3 storage backend"""

    def __init__(self, bucket: str, region: str = "sa-east-1"):
        self.bucket = bucket
        self.region = region
        self._client = None

    @property
    def client(self):
        """Lazy load boto3 client"""
        if self._client is None:
            import boto3
            self._client = boto3.client('s3', region_name=self.region)
        return self._client

    def _s3_key(self, path: str) -> str:
        return path.replace('\\', '/')

    def write_file(self, path: str, content: bytes) -> str:
        key = self._s3_key(path)
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=content,
            ContentType='application/json' if path.endswith('.json') else 'application/octet-stream',
        )
        return f"s3://{self.bucket}/{key}"

    def read_file(self, path: str) -> bytes:
        response = self.client.get_object(Bucket=self.bucket, Key=self._s3_key(path))
        return response['Body'].read()

    def exists(self, path: str) -> bool:
        from botocore.exceptions import ClientError
        try:
            self.client.head_object(Bucket=self.bucket, Key=self._s3_key(path))
            return True
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('404', 'NoSuchKey', 'NotFound'):
                return False
            raise


class CachedStorage(StorageBackend):
    """Remote backend with a local mirror.

    Writes go to the remote first; the mirror is only updated once the remote
    accepted the content. Reads fall back to the mirror when the remote fails.
    """

    def __init__(self, remote: StorageBackend, cache: StorageBackend):
        self.remote = remote
        self.cache = cache

    def write_file(self, path: str, content: bytes) -> str:
        location = self.remote.write_file(path, content)
        self.cache.write_file(path, content)
        return location

    def read_file(self, path: str) -> bytes:
        try:
            content = self.remote.read_file(path)
        except Exception as e:
            if not self.cache.exists(path):
                raise
            logger.warning("Remote read of %s failed (%s); serving local cache", path, e)
            return self.cache.read_file(path)
        self.cache.write_file(path, content)
        return content

    def exists(self, path: str) -> bool:
        try:
            return self.remote.exists(path)
        except Exception as e:
            logger.warning("Remote exists(%s) failed (%s); checking local cache", path, e)
            return self.cache.exists(path)


# Global storage instance
_storage: Optional[StorageBackend] = None


def build_storage(backend: str = STORAGE_BACKEND, data_dir: str = DATA_DIR) -> StorageBackend:
    if backend == "s3":
        logger.info("Storage: S3 bucket=%s (local cache at %s)", S3_BUCKET, data_dir)
        return CachedStorage(S3Storage(bucket=S3_BUCKET, region=AWS_REGION), LocalStorage(base_dir=data_dir))
    logger.info("Storage: local filesystem at %s", data_dir)
    return LocalStorage(base_dir=data_dir)


def get_storage() -> StorageBackend:
    """Get storage backend singleton"""
    global _storage
    if _storage is None:
        _storage = build_storage()
    return _storage


def set_storage(storage: Optional[StorageBackend]) -> None:
    """Swap the singleton (tests point it at a temporary directory)."""
    global _storage
    _storage = storage
