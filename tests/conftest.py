# File: tests/conftest.py

import io
import re
from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

from portfolio_api.core.config import Settings
from portfolio_api.db.store import JsonRecordStore
from portfolio_api.main import create_application
from portfolio_api.services.storage_service import ObjectStorage


def _missing(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, operation)


class FakeS3Client:
    """In-memory stand-in for the handful of S3 calls ObjectStorage makes."""

    def __init__(self):
        self.buckets = {}
        self.policies = {}

    def list_buckets(self):
        return {"Buckets": [{"Name": name} for name in self.buckets]}

    def head_bucket(self, Bucket):
        if Bucket not in self.buckets:
            raise _missing("HeadBucket")
        return {}

    def create_bucket(self, Bucket):
        self.buckets.setdefault(Bucket, {})
        return {}

    def put_bucket_policy(self, Bucket, Policy):
        self.policies[Bucket] = Policy
        return {}

    def _object(self, bucket, key, operation):
        obj = self.buckets.get(bucket, {}).get(key)
        if obj is None:
            raise _missing(operation)
        return obj

    def put_object(self, Bucket, Key, Body, ContentType, CacheControl=None, Metadata=None):
        self.buckets[Bucket][Key] = {
            "Body": bytes(Body),
            "ContentType": ContentType,
            "Metadata": Metadata or {},
            "LastModified": datetime.now(timezone.utc),
        }
        return {"ETag": '"fake"'}

    def head_object(self, Bucket, Key):
        obj = self._object(Bucket, Key, "HeadObject")
        return {
            "ContentLength": len(obj["Body"]),
            "ContentType": obj["ContentType"],
            "ETag": '"fake"',
            "LastModified": obj["LastModified"],
            "Metadata": obj["Metadata"],
        }

    def delete_object(self, Bucket, Key):
        self.buckets.get(Bucket, {}).pop(Key, None)
        return {}

    def get_object(self, Bucket, Key, Range=None):
        obj = self._object(Bucket, Key, "GetObject")
        body = obj["Body"]
        if Range:
            start, end = re.match(r"bytes=(\d+)-(\d+)", Range).groups()
            body = body[int(start): int(end) + 1]
        return {
            "Body": io.BytesIO(body),
            "ContentLength": len(body),
            "ContentType": obj["ContentType"],
        }

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"http://signed.local/{Params['Bucket']}/{Params['Key']}?expires={ExpiresIn}"

    def get_paginator(self, operation):
        return FakePaginator(self)


class FakePaginator:
    def __init__(self, client):
        self.client = client

    def paginate(self, Bucket, Prefix="", Delimiter=None):
        contents, prefixes = [], set()
        for key, obj in sorted(self.client.buckets.get(Bucket, {}).items()):
            if not key.startswith(Prefix):
                continue
            rest = key[len(Prefix):]
            if Delimiter and Delimiter in rest:
                prefixes.add(Prefix + rest.split(Delimiter, 1)[0] + Delimiter)
                continue
            contents.append(
                {
                    "Key": key,
                    "Size": len(obj["Body"]),
                    "ETag": '"fake"',
                    "LastModified": obj["LastModified"],
                }
            )
        yield {"Contents": contents, "CommonPrefixes": [{"Prefix": p} for p in sorted(prefixes)]}


@pytest.fixture
def config(tmp_path):
    return Settings(
        environment="test",
        data_dir=tmp_path,
        rate_limit_enabled=False,
        storage_connect_retries=1,
        storage_connect_delay=0,
    )


@pytest.fixture
def store(config):
    return JsonRecordStore(config.db_file)


@pytest.fixture
def s3_client():
    return FakeS3Client()


@pytest.fixture
def storage(config, s3_client):
    return ObjectStorage(config, client=s3_client)


@pytest.fixture
def client(config, store, storage):
    app = create_application(config=config, store=store, storage=storage)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(client, config):
    resp = client.post(
        "/api/auth/login",
        json={"username": config.admin_username, "password": config.admin_password},
    )
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['accessToken']}"}


@pytest.fixture
def make_project(client, admin_headers):
    def _make(**overrides):
        payload = {
            "title": "Test Project",
            "description": "A project used in tests",
            "technologies": "Python, FastAPI",
        }
        payload.update(overrides)
        resp = client.post("/api/projects", json=payload, headers=admin_headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["project"]

    return _make
