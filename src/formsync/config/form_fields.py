"""Settings controlling how repeater form fields are projected."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag

TRANSLATED_MEDIA_FIELDS_ENV = "FORMSYNC_TRANSLATED_MEDIA_FIELDS"
TRANSLATED_FILE_FIELDS_ENV = "FORMSYNC_TRANSLATED_FILE_FIELDS"


@dataclass(frozen=True, slots=True)
class FormFieldsConfig:
    """Whether media and file field maps arrive partitioned by locale.

    When partitioned, a collaborator returns ``{locale: {role: value}}`` and the
    projected field names carry a trailing ``[<locale>]`` segment.
    """

    translated_media_fields: bool = False
    translated_file_fields: bool = True


def get_form_fields_config() -> FormFieldsConfig:
    return FormFieldsConfig(
        translated_media_fields=env_flag(TRANSLATED_MEDIA_FIELDS_ENV, default=False),
        translated_file_fields=env_flag(TRANSLATED_FILE_FIELDS_ENV, default=True),
    )
