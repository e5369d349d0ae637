import io
from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError

from bucketfs.core.errors import ObjectNotFoundError
from bucketfs.storage.bucket_filesystem import MIN_TIMESTAMP, BucketFileSystem, split_filter
from bucketfs.storage.models import BucketIdentity
from bucketfs.testing.memory_client import InMemoryStorageClient

BUCKET = "site-bucket"


def _file_system(page_size=1000, keys=(), **kwargs):
    client = InMemoryStorageClient(page_size=page_size, **kwargs)
    for key in keys:
        client.put(BUCKET, key, f"content of {key}".encode("utf-8"))
    client.calls.clear()
    fs = BucketFileSystem(BucketIdentity(BUCKET, "cdn.example.com", "media"), lambda: client)
    return fs, client


DOCS = ["media/docs/a.txt", "media/docs/b.csv", "media/docs/sub/c.txt"]


@pytest.mark.parametrize(
    "filter,expected",
    [
        ("*.*", ("", "")),
        ("*.txt", ("", ".txt")),
        ("report*.csv", ("report", ".csv")),
        ("*", ("", "")),
        (None, ("", "")),
        ("a*b.txt", ("a*b", ".txt")),
    ],
)
def test_split_filter(filter, expected):
    assert split_filter(filter) == expected


def test_add_file_puts_resolved_key():
    fs, client = _file_system()

    fs.add_file("/docs/a.txt", io.BytesIO(b"hello"))

    assert client.objects["media/docs/a.txt"].data == b"hello"
    assert client.calls_named("put")[0].args == (BUCKET, "media/docs/a.txt")


def test_add_file_accepts_bytes_and_overwrites():
    fs, client = _file_system(keys=["media/docs/a.txt"])

    fs.add_file("docs\\a.txt", b"new", overwrite=False)

    assert client.objects["media/docs/a.txt"].data == b"new"
    # No existence check precedes the put
    assert [call.name for call in client.calls] == ["put"]


def test_delete_file_uses_single_key_batch():
    fs, client = _file_system(keys=DOCS)

    fs.delete_file("/docs/a.txt")

    assert client.calls_named("delete_many")[0].args == (BUCKET, ["media/docs/a.txt"])
    assert "media/docs/a.txt" not in client.objects


def test_delete_directory_removes_everything_under_prefix():
    fs, client = _file_system(keys=DOCS + ["media/docs2/keep.txt", "media/other.txt"])

    fs.delete_directory("/docs")

    assert sorted(client.objects) == ["media/docs2/keep.txt", "media/other.txt"]
    assert fs.directory_exists("/docs") is False
    assert fs.directory_exists("/docs2") is True


def test_delete_directory_recursive_flag_has_no_effect():
    fs, client = _file_system(keys=DOCS)

    fs.delete_directory("/docs", recursive=False)

    assert client.objects == {}


def test_delete_directory_pages_and_batches():
    keys = [f"media/big/{index:04d}.bin" for index in range(25)]
    client = InMemoryStorageClient(page_size=10)
    for key in keys:
        client.put(BUCKET, key, b"x")
    fs = BucketFileSystem(BucketIdentity(BUCKET, "cdn.example.com", "media"), lambda: client, delete_batch_size=10)

    fs.delete_directory("big")

    assert len(client.calls_named("list")) == 3
    assert [len(call.args[1]) for call in client.calls_named("delete_many")] == [10, 10, 5]
    assert client.objects == {}


def test_delete_empty_directory_issues_no_delete():
    fs, client = _file_system(keys=DOCS)

    fs.delete_directory("/missing")

    assert client.calls_named("delete_many") == []
    assert len(client.objects) == 3


def test_file_exists():
    fs, _client = _file_system(keys=DOCS)

    assert fs.file_exists("/docs/a.txt") is True
    assert fs.file_exists("/docs/missing.txt") is False


def test_file_exists_propagates_other_failures():
    class DeniedClient(InMemoryStorageClient):
        def stat(self, bucket, key):
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "HeadObject")

    client = DeniedClient()
    fs = BucketFileSystem(BucketIdentity(BUCKET, "cdn.example.com", "media"), lambda: client)

    with pytest.raises(ClientError):
        fs.file_exists("/docs/a.txt")


def test_directory_exists_lists_one_key():
    fs, client = _file_system(keys=DOCS)

    assert fs.directory_exists("/docs") is True
    assert fs.directory_exists("docs/sub/") is True
    assert fs.directory_exists("/doc") is False

    first = client.calls_named("list")[0]
    assert first.args == (BUCKET, "media/docs/", None, None, 1)


def test_get_files_lists_one_level_with_extension_filter():
    fs, _client = _file_system(keys=DOCS)

    assert fs.get_files("/docs", "*.txt") == ["docs/a.txt"]


def test_get_files_default_filter_matches_all_files():
    fs, _client = _file_system(keys=DOCS + ["media/docs/"])

    assert fs.get_files("/docs") == ["docs/a.txt", "docs/b.csv"]


def test_get_files_name_prefix_filter():
    keys = ["media/reports/report-1.csv", "media/reports/report-2.txt", "media/reports/summary.csv"]
    fs, client = _file_system(keys=keys)

    assert fs.get_files("/reports", "report*.csv") == ["reports/report-1.csv"]
    assert client.calls_named("list")[0].args == (BUCKET, "media/reports/report", "/", None, None)


def test_get_files_across_pages():
    keys = [f"media/docs/{index:02d}.txt" for index in range(12)]
    fs, client = _file_system(page_size=5, keys=keys)

    files = fs.get_files("/docs", "*.txt")

    assert files == [f"docs/{index:02d}.txt" for index in range(12)]
    assert len(client.calls_named("list")) == 3


def test_get_directories():
    fs, _client = _file_system(keys=DOCS)

    assert fs.get_directories("/docs") == ["media/docs/sub/"]


def test_get_directories_of_root():
    fs, _client = _file_system(keys=DOCS + ["media/images/logo.png", "media/root.txt"])

    assert fs.get_directories("") == ["media/docs/", "media/images/"]
    assert fs.get_directories(None) == ["media/docs/", "media/images/"]


def test_get_directories_results_are_accepted_back_as_paths():
    fs, _client = _file_system(keys=DOCS)

    (subdirectory,) = fs.get_directories("/docs")

    assert fs.directory_exists(subdirectory) is True
    assert fs.get_files(subdirectory, "*.txt") == ["docs/sub/c.txt"]
    assert fs.get_directories(subdirectory) == []


def test_get_last_modified_and_created():
    fs, client = _file_system(keys=DOCS)
    expected = client.objects["media/docs/a.txt"].metadata.last_modified

    assert fs.get_last_modified("/docs/a.txt") == expected
    assert fs.get_created("/docs/a.txt") == expected


def test_missing_file_yields_min_timestamp():
    fs, _client = _file_system(keys=DOCS)

    assert fs.file_exists("/docs/gone.txt") is False
    assert fs.get_last_modified("/docs/gone.txt") == MIN_TIMESTAMP
    assert fs.get_created("/docs/gone.txt") == MIN_TIMESTAMP
    assert MIN_TIMESTAMP == datetime.min.replace(tzinfo=timezone.utc)


def test_get_url_always_qualified():
    fs, client = _file_system()

    assert fs.get_url("/docs/a.txt") == "https://cdn.example.com/media/docs/a.txt"
    assert fs.get_url("media/docs/a.txt") == "https://cdn.example.com/media/docs/a.txt"
    assert client.calls == []


def test_get_relative_path_and_full_path():
    fs, _client = _file_system()

    assert fs.get_relative_path("/media/docs/a.txt") == "docs/a.txt"
    assert fs.get_full_path("/docs/a.txt") == "/docs/a.txt"


def test_open_file_returns_rewound_buffer():
    fs, _client = _file_system(keys=DOCS)

    stream = fs.open_file("/docs/a.txt")

    assert stream.tell() == 0
    assert stream.read() == b"content of media/docs/a.txt"
    stream.seek(0)
    assert stream.read(7) == b"content"


def test_open_missing_file_raises_not_found():
    fs, _client = _file_system(keys=DOCS)

    with pytest.raises(ObjectNotFoundError) as exc_info:
        fs.open_file("/docs/gone.txt")
    assert exc_info.value.key == "media/docs/gone.txt"
