"""
Tests for the S3 storage system and its error translation.
"""

import asyncio
import io
import unittest

from botocore.exceptions import EndpointConnectionError, IncompleteReadError

from r2_roundtrip.configuration import StoreConfig
from r2_roundtrip.errors import StoreError
from r2_roundtrip.systems.base import ObjectStorageSystem, classify_client_error
from r2_roundtrip.systems.r2 import R2System

from fakes import FakeS3Client, client_error, connected_storage


def make_config(**overrides):
    values = dict(
        endpoint_url="https://account.r2.cloudflarestorage.com",
        access_key_id="key-id",
        access_key_secret="secret",
        bucket_name="demo",
    )
    values.update(overrides)
    return StoreConfig(**values)


class TestClassifyClientError(unittest.TestCase):

    def test_no_such_key_is_not_found(self):
        error = classify_client_error(client_error("NoSuchKey", 404, "GetObject"), "GetObject", "a.json")

        self.assertEqual(error.kind, "not_found")
        self.assertEqual(error.code, "NoSuchKey")
        self.assertEqual(error.operation, "GetObject")
        self.assertEqual(error.key, "a.json")
        self.assertIn("not found", str(error))

    def test_access_denied_is_auth(self):
        error = classify_client_error(client_error("AccessDenied", 403, "PutObject"), "PutObject")
        self.assertEqual(error.kind, "auth")

    def test_bucket_exists_is_conflict(self):
        error = classify_client_error(client_error("BucketAlreadyOwnedByYou", 409, "CreateBucket"), "CreateBucket")

        self.assertEqual(error.kind, "conflict")
        self.assertEqual(error.http_status, 409)

    def test_other_codes_are_api(self):
        error = classify_client_error(client_error("InternalError", 500, "ListBuckets"), "ListBuckets")

        self.assertEqual(error.kind, "api")
        self.assertIn("InternalError", str(error))


class TestObjectStorageSystem(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.config = make_config()
        self.fake = FakeS3Client()
        self.storage = connected_storage(self.config, self.fake)

    def test_r2_uses_path_addressing(self):
        storage = R2System(self.config)

        self.assertEqual(storage._config.s3["addressing_style"], "path")
        self.assertEqual(storage.bucket_name, "demo")
        self.assertIsNone(storage.client)

    async def test_call_before_entering_context_fails(self):
        storage = ObjectStorageSystem(self.config)

        with self.assertRaises(RuntimeError):
            await storage.list_buckets()

    async def test_put_then_get(self):
        await self.storage.create_bucket()
        await self.storage.put_object("a.json", io.BytesIO(b"[1, 2]"), 6)

        self.assertEqual(await self.storage.get_object("a.json"), b"[1, 2]")
        self.assertTrue(self.fake.bodies[-1].closed)

    async def test_body_released_when_read_fails(self):
        self.fake.add_object("demo", "a.json", b"[1, 2]")
        self.fake.read_failures["a.json"] = IncompleteReadError(actual_bytes=3, expected_bytes=6)

        with self.assertRaises(StoreError) as ctx:
            await self.storage.get_object("a.json")

        self.assertEqual(ctx.exception.kind, "io")
        self.assertTrue(self.fake.bodies[-1].closed)

    async def test_missing_key_raises_not_found_with_cause(self):
        await self.storage.create_bucket()

        with self.assertRaises(StoreError) as ctx:
            await self.storage.get_object("missing.json")

        self.assertEqual(ctx.exception.kind, "not_found")
        self.assertEqual(ctx.exception.key, "missing.json")
        self.assertIsNotNone(ctx.exception.cause)
        self.assertEqual(ctx.exception.cause.response["Error"]["Code"], "NoSuchKey")

    async def test_transport_error_is_io(self):
        self.fake.failures["ListBuckets"] = EndpointConnectionError(endpoint_url=self.config.endpoint_url)

        with self.assertRaises(StoreError) as ctx:
            await self.storage.list_buckets()

        self.assertEqual(ctx.exception.kind, "io")
        self.assertIsInstance(ctx.exception.cause, EndpointConnectionError)

    async def test_request_deadline(self):
        storage = connected_storage(make_config(request_timeout_seconds=0.01), self.fake)

        async def slow_list_buckets():
            await asyncio.sleep(1)

        self.fake.list_buckets = slow_list_buckets

        with self.assertRaises(StoreError) as ctx:
            await storage.list_buckets()

        self.assertEqual(ctx.exception.kind, "timeout")

    async def test_listing_follows_continuation_tokens_in_order(self):
        fake = FakeS3Client(page_size=2)
        storage = connected_storage(self.config, fake)
        keys = ["c.json", "a.json", "e.json", "b.json", "d.json"]
        for key in keys:
            fake.add_object("demo", key, key.encode())

        objects = await storage.list_objects()

        self.assertEqual([summary.key for summary in objects], keys)
        self.assertEqual(fake.count("ListObjectsV2"), 3)

    async def test_list_buckets(self):
        self.fake.add_bucket("demo")
        self.fake.add_bucket("other")

        buckets = await self.storage.list_buckets()

        self.assertEqual([bucket.name for bucket in buckets], ["demo", "other"])
        self.assertIsNotNone(buckets[0].creation_date)


if __name__ == '__main__':
    unittest.main()
