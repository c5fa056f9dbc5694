import base64

import pytest

from app.core.errors import PhotoIngestionError
from app.services.photos import MIME_EXTENSIONS, decode_photo, ingest, select_items, validate_batch
from conftest import photo_data_url

MIB = 1024 * 1024


def _code(exc_info) -> str:
    return exc_info.value.code


def test_select_items_drops_empty_and_keeps_first_five():
    items = [None, "", {}] + [f"item-{i}" for i in range(7)]
    assert select_items(items) == [f"item-{i}" for i in range(5)]


@pytest.mark.parametrize("alias", ["dataUrl", "data_url", "base64", "url"])
def test_decode_photo_accepts_mapping_aliases(alias):
    blob = decode_photo({alias: photo_data_url()})
    assert blob.content_type == "image/png"
    assert blob.filename.endswith(".png")


def test_decode_photo_builds_timestamped_filename_and_public_url():
    blob = decode_photo(photo_data_url(mime="image/jpeg"))
    stamp, _, rest = blob.filename.partition("-")
    assert stamp.isdigit()
    assert rest.endswith(".jpg")
    assert blob.url == f"/uploads/places/{blob.filename}"


def test_decode_photo_mime_is_case_insensitive():
    assert decode_photo(photo_data_url(mime="IMAGE/WEBP")).filename.endswith(".webp")


def test_decode_photo_strips_whitespace_inside_base64():
    encoded = base64.b64encode(b"abcdefghijkl").decode("ascii")
    spaced = " ".join(encoded[i:i + 4] for i in range(0, len(encoded), 4))
    blob = decode_photo(f"data:image/gif;base64,{spaced}\n")
    assert blob.data == b"abcdefghijkl"


@pytest.mark.parametrize(
    "item, code",
    [
        (42, "missing_photo"),
        ({"caption": "sem dados"}, "missing_photo_data"),
        ("http://example.com/foto.png", "invalid_data_url"),
        ("data:image/png;base64,@@@@", "invalid_data_url"),
        ("data:image/bmp;base64,AAAA", "unsupported_mime"),
        ("data:image/png;base64,   ", "empty_photo"),
    ],
)
def test_decode_photo_reason_codes(item, code):
    with pytest.raises(PhotoIngestionError) as exc_info:
        decode_photo(item)
    assert _code(exc_info) == code


def test_decode_photo_rejects_more_than_five_mib():
    with pytest.raises(PhotoIngestionError) as exc_info:
        decode_photo(photo_data_url(size=5 * MIB + 1))
    assert _code(exc_info) == "photo_too_large"


def test_decode_photo_accepts_exactly_the_size_limit():
    assert len(decode_photo(photo_data_url(size=1000), max_bytes=1000).data) == 1000


def test_validate_batch_requires_at_least_one_photo():
    with pytest.raises(PhotoIngestionError) as exc_info:
        validate_batch([None, "", {}])
    assert _code(exc_info) == "missing_photo"


def test_ingest_rejects_whole_batch_without_writing(storage):
    items = [photo_data_url(), "data:image/tiff;base64,AAAA", photo_data_url()]

    with pytest.raises(PhotoIngestionError) as exc_info:
        ingest(items, storage)

    assert _code(exc_info) == "unsupported_mime"
    assert not storage.root.exists()


def test_ingest_stages_then_promote_publishes(storage):
    batch = ingest([photo_data_url(), photo_data_url(mime="image/gif")], storage)

    assert storage.list_public() == []
    assert storage.list_staged_batches() == [batch.batch_id]

    storage.promote(batch)

    assert storage.list_public() == sorted(batch.filenames)
    assert storage.list_staged_batches() == []
    assert all(url.startswith("/uploads/places/") for url in batch.urls)


def test_discard_removes_staged_and_promoted_files(storage):
    batch = ingest([photo_data_url()], storage)
    storage.promote(batch)

    storage.discard(batch)

    assert storage.list_public() == []
    assert storage.list_staged_batches() == []


def test_every_allowed_mime_has_an_extension():
    assert set(MIME_EXTENSIONS.values()) == {"jpg", "png", "gif", "webp"}


def test_decode_photo_accepts_unpadded_base64():
    blob = decode_photo("data:image/png;base64,iVBORw0KGgo")
    assert blob.data == b"\x89PNG\r\n\x1a\n"


def test_decode_photo_checks_size_before_decoding():
    oversized = "data:image/png;base64," + "!" * 4000

    with pytest.raises(PhotoIngestionError) as exc_info:
        decode_photo(oversized, max_bytes=100)

    assert _code(exc_info) == "photo_too_large"


@pytest.mark.parametrize("items", ["data:image/png;base64,AAAA", {"dataUrl": "x"}, 7])
def test_select_items_ignores_non_list_payloads(items):
    assert select_items(items) == []
