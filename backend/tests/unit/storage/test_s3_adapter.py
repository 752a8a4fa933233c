"""Unit tests for S3 Storage Adapter using moto

This module tests the S3StorageAdapter implementation using moto to mock AWS S3.
Tests cover: store, public-read grant, delete, exists, public URLs and bucket checks.
"""

import hashlib
import io
import re

import boto3
import pytest
from moto import mock_aws

from domain.documents.ports.object_storage_port import StoredFile
from domain.errors import StorageError
from infrastructure.storage import StorageConfig, S3StorageAdapter
from infrastructure.storage.storage_config import validate_storage_config


# Test constants
TEST_BUCKET = "test-reviewflow-bucket"
TEST_REGION = "us-east-1"
TEST_ACCESS_KEY = "test-access-key"
TEST_SECRET_KEY = "test-secret-key"
ALL_USERS_URI = "http://acs.amazonaws.com/groups/global/AllUsers"


@pytest.fixture
def s3_client():
    """Mock S3 with the test bucket created"""
    with mock_aws():
        client = boto3.client(
            "s3",
            region_name=TEST_REGION,
            aws_access_key_id=TEST_ACCESS_KEY,
            aws_secret_access_key=TEST_SECRET_KEY,
        )
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def storage_adapter(s3_client):
    """S3StorageAdapter pointed at the mocked bucket"""
    return S3StorageAdapter(
        endpoint_url=None,
        access_key=TEST_ACCESS_KEY,
        secret_key=TEST_SECRET_KEY,
        bucket_name=TEST_BUCKET,
        region=TEST_REGION,
    )


class TestStoreFile:
    """Test file storage operations"""

    @pytest.mark.asyncio
    async def test_store_file_success(self, storage_adapter, s3_client):
        """Test successful file upload"""
        content = b"%PDF-1.4 test content"

        stored = await storage_adapter.store_file(
            file=io.BytesIO(content),
            storage_name="1735689600000-contract.pdf",
            mime_type="application/pdf",
        )

        assert isinstance(stored, StoredFile)
        assert re.fullmatch(r"\d{4}/\d{2}/1735689600000-contract\.pdf", stored.storage_key)
        assert stored.sha256 == hashlib.sha256(content).hexdigest()
        assert stored.size_bytes == len(content)
        assert stored.mime_type == "application/pdf"

        obj = s3_client.get_object(Bucket=TEST_BUCKET, Key=stored.storage_key)
        assert obj["Body"].read() == content
        assert obj["ContentType"] == "application/pdf"
        assert obj["Metadata"]["sha256"] == stored.sha256

    @pytest.mark.asyncio
    async def test_store_file_streaming_chunks(self, storage_adapter):
        """Test file larger than the 8KB read chunk"""
        content = b"X" * (20 * 1024)

        stored = await storage_adapter.store_file(io.BytesIO(content), "big.pdf", "application/pdf")

        assert stored.size_bytes == len(content)
        assert stored.sha256 == hashlib.sha256(content).hexdigest()

    @pytest.mark.asyncio
    async def test_store_file_empty_raises_error(self, storage_adapter):
        with pytest.raises(ValueError, match="Cannot store empty file"):
            await storage_adapter.store_file(io.BytesIO(b""), "empty.pdf", "application/pdf")

    @pytest.mark.asyncio
    async def test_store_file_missing_bucket(self, s3_client):
        adapter = S3StorageAdapter(
            endpoint_url=None,
            access_key=TEST_ACCESS_KEY,
            secret_key=TEST_SECRET_KEY,
            bucket_name="missing-bucket",
            region=TEST_REGION,
        )

        with pytest.raises(StorageError, match="Failed to upload file"):
            await adapter.store_file(io.BytesIO(b"data"), "a.pdf", "application/pdf")


class TestMakePublic:
    """Test anonymous read grant"""

    @pytest.mark.asyncio
    async def test_make_public_grants_all_users_read(self, storage_adapter, s3_client):
        stored = await storage_adapter.store_file(io.BytesIO(b"data"), "a.pdf", "application/pdf")

        await storage_adapter.make_public(stored.storage_key)

        acl = s3_client.get_object_acl(Bucket=TEST_BUCKET, Key=stored.storage_key)
        grants = {
            (grant["Grantee"].get("URI"), grant["Permission"])
            for grant in acl["Grants"]
        }
        assert (ALL_USERS_URI, "READ") in grants

    @pytest.mark.asyncio
    async def test_make_public_missing_object(self, storage_adapter):
        with pytest.raises(StorageError, match="Failed to make file public"):
            await storage_adapter.make_public("2025/01/missing.pdf")


class TestDeleteAndExists:
    """Test delete and HEAD checks"""

    @pytest.mark.asyncio
    async def test_file_exists(self, storage_adapter):
        stored = await storage_adapter.store_file(io.BytesIO(b"data"), "a.pdf", "application/pdf")

        assert await storage_adapter.file_exists(stored.storage_key) is True
        assert await storage_adapter.file_exists("2025/01/other.pdf") is False

    @pytest.mark.asyncio
    async def test_delete_file(self, storage_adapter):
        stored = await storage_adapter.store_file(io.BytesIO(b"data"), "a.pdf", "application/pdf")

        assert await storage_adapter.delete_file(stored.storage_key) is True
        assert await storage_adapter.file_exists(stored.storage_key) is False

    @pytest.mark.asyncio
    async def test_delete_missing_file(self, storage_adapter):
        assert await storage_adapter.delete_file("2025/01/missing.pdf") is False


class TestPublicUrl:
    """Test public link construction"""

    def test_aws_virtual_hosted_url(self, storage_adapter):
        assert (
            storage_adapter.public_url("2025/01/1-a.pdf")
            == f"https://{TEST_BUCKET}.s3.{TEST_REGION}.amazonaws.com/2025/01/1-a.pdf"
        )

    def test_custom_endpoint_uses_path_style(self):
        with mock_aws():
            adapter = S3StorageAdapter(
                endpoint_url="http://localhost:9000/",
                access_key=TEST_ACCESS_KEY,
                secret_key=TEST_SECRET_KEY,
                bucket_name=TEST_BUCKET,
            )
        assert adapter.public_url("k.pdf") == f"http://localhost:9000/{TEST_BUCKET}/k.pdf"

    def test_public_base_url_wins(self):
        with mock_aws():
            adapter = S3StorageAdapter(
                endpoint_url="http://localhost:9000",
                access_key=TEST_ACCESS_KEY,
                secret_key=TEST_SECRET_KEY,
                bucket_name=TEST_BUCKET,
                public_base_url="https://cdn.example.com/docs/",
            )
        assert adapter.public_url("2025/01/a b.pdf") == "https://cdn.example.com/docs/2025/01/a%20b.pdf"

    @pytest.mark.asyncio
    async def test_stored_file_carries_public_url(self, storage_adapter):
        stored = await storage_adapter.store_file(io.BytesIO(b"data"), "a.pdf", "application/pdf")

        assert stored.public_url == storage_adapter.public_url(stored.storage_key)


class TestBucketChecks:
    """Test bucket verification and configuration"""

    @pytest.mark.asyncio
    async def test_verify_bucket_exists(self, storage_adapter):
        assert await storage_adapter.verify_bucket_exists() is True

    @pytest.mark.asyncio
    async def test_verify_missing_bucket(self, s3_client):
        adapter = S3StorageAdapter(
            endpoint_url=None,
            access_key=TEST_ACCESS_KEY,
            secret_key=TEST_SECRET_KEY,
            bucket_name="missing-bucket",
            region=TEST_REGION,
        )

        with pytest.raises(StorageError, match="does not exist"):
            await adapter.verify_bucket_exists()

    def test_from_config(self, s3_client):
        config = StorageConfig(
            endpoint_url=None,
            access_key=TEST_ACCESS_KEY,
            secret_key=TEST_SECRET_KEY,
            bucket_name=TEST_BUCKET,
            region="eu-west-1",
        )

        adapter = S3StorageAdapter.from_config(config)
        assert adapter.bucket_name == TEST_BUCKET
        assert adapter.region == "eu-west-1"

    def test_validate_storage_config_requires_bucket(self):
        config = StorageConfig(
            endpoint_url=None,
            access_key=TEST_ACCESS_KEY,
            secret_key=TEST_SECRET_KEY,
            bucket_name="",
        )

        with pytest.raises(ValueError):
            validate_storage_config(config)
