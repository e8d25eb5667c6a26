"""
Tests for the transfer and listing data structures.
"""

import json
import unittest
from datetime import datetime, timezone

from r2_roundtrip.models import (
    BucketSummary,
    ObjectSummary,
    TransferRequest,
    build_sample_payload,
    default_object_key,
    summaries_to_json,
)


class TestTransferRequest(unittest.TestCase):

    def test_content_length_must_match_payload(self):
        with self.assertRaises(ValueError):
            TransferRequest(key="a.json", payload=b"abc", content_length=4)

    def test_empty_key_rejected(self):
        with self.assertRaises(ValueError):
            TransferRequest(key="", payload=b"abc", content_length=3)

    def test_for_payload_uses_given_key(self):
        request = TransferRequest.for_payload(b"hello", "hello.txt")

        self.assertEqual(request.key, "hello.txt")
        self.assertEqual(request.content_length, 5)

    def test_for_payload_falls_back_to_timestamp_key(self):
        request = TransferRequest.for_payload(b"hello")

        self.assertTrue(request.key)
        self.assertTrue(request.key.endswith(".json"))

    def test_default_key_format(self):
        now = datetime(2023, 1, 1, 12, 30, 45, tzinfo=timezone.utc)
        self.assertEqual(default_object_key(now), "20230101_123045.json")


class TestSamplePayload(unittest.TestCase):

    def test_payload_is_json_array_of_records(self):
        now = datetime(2023, 1, 1, tzinfo=timezone.utc)
        records = json.loads(build_sample_payload(now))

        self.assertEqual(records, [{"A": "1", "B": "2023-01-01T00:00:00Z"}])


class TestSummaries(unittest.TestCase):

    def test_object_summary_from_listing_entry(self):
        modified = datetime(2022, 5, 18, 17, 20, 21, tzinfo=timezone.utc)
        summary = ObjectSummary.from_dict({
            "Key": "ferriswasm.png",
            "Size": 87671,
            "LastModified": modified,
            "ETag": '"eb2b891dc67b81755d2b726d9110af16"',
            "StorageClass": "STANDARD",
        })

        self.assertEqual(summary.key, "ferriswasm.png")
        self.assertEqual(summary.size, 87671)
        self.assertEqual(summary.last_modified, modified)
        self.assertEqual(summary.storage_class, "STANDARD")

    def test_summaries_render_as_indented_json(self):
        summaries = [
            ObjectSummary(key="a.json", size=3),
            BucketSummary(name="demo", creation_date=datetime(2023, 1, 1, tzinfo=timezone.utc)),
        ]

        documents = summaries_to_json(summaries)

        self.assertEqual(len(documents), 2)
        self.assertIn("\n\t", documents[0])
        self.assertEqual(json.loads(documents[0])["Key"], "a.json")
        self.assertEqual(json.loads(documents[1])["CreationDate"], "2023-01-01T00:00:00+00:00")


if __name__ == '__main__':
    unittest.main()
