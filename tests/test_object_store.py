"""Tests for the S3 object store adapter using botocore's Stubber."""

import io

import boto3
import pytest
from botocore.response import StreamingBody
from botocore.stub import ANY, Stubber

from pagevault.exceptions import StorageError
from pagevault.object_store import ObjectStore


@pytest.fixture
def s3():
    client = boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )
    with Stubber(client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


def _body(data: bytes) -> StreamingBody:
    return StreamingBody(io.BytesIO(data), len(data))


def test_put_sends_metadata(s3):
    client, stubber = s3
    stubber.add_response("put_object", {}, {
        "Bucket": "vault",
        "Key": "1/a.md",
        "Body": b"# A",
        "ContentType": "text/markdown",
        "Metadata": {"original_filename": "a.md"},
    })

    ObjectStore(client, "vault").put("1/a.md", b"# A", "text/markdown", {"original_filename": "a.md"})


def test_get_returns_body_and_metadata(s3):
    client, stubber = s3
    stubber.add_response(
        "get_object",
        {
            "Body": _body(b"<p>x</p>"),
            "ContentLength": 8,
            "ContentType": "text/html",
            "Metadata": {"original_filename": "x.html"},
        },
        {"Bucket": "vault", "Key": "1/x.html"},
    )

    stored = ObjectStore(client, "vault").get("1/x.html")

    assert stored.data == b"<p>x</p>"
    assert stored.size == 8
    assert stored.custom_metadata == {"original_filename": "x.html"}


def test_get_range_reports_full_size(s3):
    client, stubber = s3
    stubber.add_response(
        "get_object",
        {"Body": _body(b"0123"), "ContentLength": 4, "ContentRange": "bytes 0-3/1000"},
        {"Bucket": "vault", "Key": "1/big.html", "Range": "bytes=0-3"},
    )

    stored = ObjectStore(client, "vault").get_range("1/big.html", 4)

    assert stored.data == b"0123"
    assert stored.size == 1000


def test_missing_key_returns_none(s3):
    client, stubber = s3
    stubber.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
    stubber.add_client_error("head_object", service_error_code="404", http_status_code=404)

    store = ObjectStore(client, "vault")

    assert store.get("1/gone.md") is None
    assert store.head("1/gone.md") is None


def test_other_errors_raise_storage_error(s3):
    client, stubber = s3
    stubber.add_client_error("get_object", service_error_code="InternalError", http_status_code=500)
    stubber.add_client_error("delete_object", service_error_code="AccessDenied", http_status_code=403)

    store = ObjectStore(client, "vault")

    with pytest.raises(StorageError):
        store.get("1/a.md")
    with pytest.raises(StorageError):
        store.delete("1/a.md")


def test_copy_replaces_metadata(s3):
    client, stubber = s3
    stubber.add_response("copy_object", {}, {
        "Bucket": "vault",
        "Key": "1/new.html",
        "CopySource": {"Bucket": "vault", "Key": "root.html"},
        "Metadata": {"original_filename": "root.html"},
        "MetadataDirective": "REPLACE",
        "ContentType": "text/html",
    })

    ObjectStore(client, "vault").copy("root.html", "1/new.html", {"original_filename": "root.html"}, "text/html")


def test_list_objects_pages(s3):
    client, stubber = s3
    stubber.add_response(
        "list_objects_v2",
        {
            "Contents": [{"Key": "1/a.md", "Size": 3}, {"Key": "b.html", "Size": 5}],
            "IsTruncated": True,
            "NextContinuationToken": "next-page",
        },
        {"Bucket": "vault", "MaxKeys": 2},
    )
    stubber.add_response(
        "list_objects_v2",
        {"Contents": [{"Key": "2/c.md", "Size": 1}], "IsTruncated": False},
        {"Bucket": "vault", "MaxKeys": 2, "ContinuationToken": "next-page"},
    )
    store = ObjectStore(client, "vault")

    first = store.list_objects(None, 2)
    second = store.list_objects(first.next_cursor, 2)

    assert [o.key for o in first.objects] == ["1/a.md", "b.html"]
    assert first.truncated and first.next_cursor == "next-page"
    assert [(o.key, o.size) for o in second.objects] == [("2/c.md", 1)]
    assert second.next_cursor is None


def test_listing_failure(s3):
    client, stubber = s3
    stubber.add_client_error("list_objects_v2", service_error_code="SlowDown", http_status_code=503)

    with pytest.raises(StorageError):
        ObjectStore(client, "vault").list_objects()


def test_head_has_no_body(s3):
    client, stubber = s3
    stubber.add_response(
        "head_object",
        {"ContentLength": 42, "ContentType": "text/html", "Metadata": {}},
        {"Bucket": "vault", "Key": ANY},
    )

    stored = ObjectStore(client, "vault").head("1/a.html")

    assert stored.size == 42
    assert stored.data == b""
