"""Tests for turning stored image URLs back into object keys."""

import pytest

from brandstore.storage.key_resolver import resolve_object_key


class TestMarkerUrls:
    def test_virtual_hosted_s3_url(self):
        url = "https://brand-assets.s3.ap-south-1.amazonaws.com/BrandStore/Products/1700000000000-42.jpg"
        assert resolve_object_key(url) == "BrandStore/Products/1700000000000-42.jpg"

    def test_path_style_s3_url_strips_bucket(self):
        url = "https://s3.ap-south-1.amazonaws.com/brand-assets/BrandStoreBanner/1-2.png"
        assert resolve_object_key(url, bucket="brand-assets") == "BrandStoreBanner/1-2.png"

    def test_supabase_public_url_strips_bucket(self):
        url = "https://proj.supabase.co/storage/v1/object/public/brandstore/BrandStore/Products/9-9.webp"
        assert resolve_object_key(url, bucket="brandstore") == "BrandStore/Products/9-9.webp"

    def test_query_string_is_ignored(self):
        url = "https://proj.supabase.co/storage/v1/object/public/brandstore/a/b.jpg?width=200#top"
        assert resolve_object_key(url, bucket="brandstore") == "a/b.jpg"

    def test_percent_encoded_key_is_decoded(self):
        url = "https://proj.supabase.co/storage/v1/object/public/brandstore/Brand%20Store/x.jpg"
        assert resolve_object_key(url, bucket="brandstore") == "Brand Store/x.jpg"


class TestPlainUrls:
    def test_absolute_url_uses_path(self):
        assert resolve_object_key("https://cdn.example.com/catalog/p/1.jpg") == "catalog/p/1.jpg"

    def test_leading_bucket_segment_is_stripped(self):
        url = "https://cdn.example.com/brandstore/catalog/p/1.jpg"
        assert resolve_object_key(url, bucket="brandstore") == "catalog/p/1.jpg"

    def test_bucket_is_only_stripped_when_leading(self):
        url = "https://cdn.example.com/catalog/brandstore/1.jpg"
        assert resolve_object_key(url, bucket="brandstore") == "catalog/brandstore/1.jpg"


class TestNothingToDelete:
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_input(self, value):
        assert resolve_object_key(value) is None

    def test_relative_reference(self):
        assert resolve_object_key("uploads/1.jpg") is None

    def test_url_without_path(self):
        assert resolve_object_key("https://cdn.example.com/") is None

    def test_bucket_only(self):
        url = "https://proj.supabase.co/storage/v1/object/public/brandstore/"
        assert resolve_object_key(url, bucket="brandstore") is None
