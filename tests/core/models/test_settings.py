import pytest
from pydantic import ValidationError

from core.models.image import ImageProfile, ProfileSpec
from core.models.settings import StorageSettings, default_profiles, get_settings


class TestStorageSettingsFromEnv:
    def test_minimal_environment(self) -> None:
        settings = StorageSettings.from_env({"IMAGE_S3_BUCKET_NAME": "bucket"})

        assert settings.bucket == "bucket"
        assert settings.endpoint_url is None
        assert settings.max_file_size == 10 * 1024 * 1024
        assert settings.output_format == "webp"
        assert settings.output_content_type == "image/webp"
        assert settings.output_extension == "webp"
        assert settings.max_upload_workers == 5
        assert settings.max_concurrent_renders == 2
        assert settings.is_localstack is False

    def test_missing_bucket(self) -> None:
        with pytest.raises(RuntimeError):
            StorageSettings.from_env({})

    def test_overrides(self) -> None:
        settings = StorageSettings.from_env(
            {
                "IMAGE_S3_BUCKET_NAME": "bucket",
                "AWS_REGION": "eu-west-1",
                "AWS_ENDPOINT_URL": "http://localstack:4566/",
                "IMAGE_MAX_FILE_SIZE_MB": "5",
                "IMAGE_OUTPUT_FORMAT": "JPEG",
                "IMAGE_MAX_UPLOAD_WORKERS": "8",
                "IMAGE_MAX_CONCURRENT_RENDERS": "1",
                "APP_RUNTIME": "localstack",
            }
        )

        assert settings.region == "eu-west-1"
        assert settings.endpoint_url == "http://localstack:4566"
        assert settings.max_file_size == 5 * 1024 * 1024
        assert settings.output_format == "jpeg"
        assert settings.output_extension == "jpg"
        assert settings.max_upload_workers == 8
        assert settings.max_concurrent_renders == 1
        assert settings.is_localstack is True

    def test_unknown_output_format(self) -> None:
        with pytest.raises(ValidationError):
            StorageSettings.from_env({"IMAGE_S3_BUCKET_NAME": "b", "IMAGE_OUTPUT_FORMAT": "tiff"})


class TestProfiles:
    def test_reference_table(self) -> None:
        profiles = default_profiles()

        assert profiles[ImageProfile.THUMBNAIL] == ProfileSpec(max_width=150, max_height=150, quality=80)
        assert profiles[ImageProfile.SMALL] == ProfileSpec(max_width=300, max_height=300, quality=85)
        assert profiles[ImageProfile.MEDIUM] == ProfileSpec(max_width=600, max_height=600, quality=85)
        assert profiles[ImageProfile.LARGE] == ProfileSpec(max_width=1200, max_height=1200, quality=90)
        assert profiles[ImageProfile.ORIGINAL] == ProfileSpec(quality=90)

    def test_every_profile_required(self) -> None:
        profiles = default_profiles()
        del profiles[ImageProfile.MEDIUM]

        with pytest.raises(ValidationError):
            StorageSettings(bucket="b", profiles=profiles)

    def test_original_must_not_resize(self) -> None:
        profiles = default_profiles()
        profiles[ImageProfile.ORIGINAL] = ProfileSpec(max_width=10, max_height=10, quality=90)

        with pytest.raises(ValidationError):
            StorageSettings(bucket="b", profiles=profiles)


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()
    assert get_settings().bucket == "test-product-images"
