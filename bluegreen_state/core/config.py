from functools import lru_cache

from pydantic import AliasChoices, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _input_alias(name: str, *fallbacks: str) -> AliasChoices:
    return AliasChoices(f"INPUT_{name.upper()}", *fallbacks)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    aws_access_key_id: str = Field(default="", validation_alias=_input_alias("aws-access-key-id", "AWS_ACCESS_KEY_ID"))
    aws_secret_access_key: str = Field(
        default="",
        repr=False,
        validation_alias=_input_alias("aws-secret-access-key", "AWS_SECRET_ACCESS_KEY"),
    )
    aws_region: str = Field(default="us-east-1", validation_alias=_input_alias("aws-region", "AWS_REGION"))
    table_name: str = Field(
        default="blue-green-deployments",
        validation_alias=_input_alias("table-name", "BLUEGREEN_TABLE_NAME"),
    )
    deployment_key: str = Field(default="", validation_alias=_input_alias("deployment-key", "BLUEGREEN_DEPLOYMENT_KEY"))
    action: str = Field(default="", validation_alias=_input_alias("action", "BLUEGREEN_ACTION"))
    color: str = Field(default="", validation_alias=_input_alias("color", "BLUEGREEN_COLOR"))
    initial_color: str = Field(default="blue", validation_alias=_input_alias("initial-color", "BLUEGREEN_INITIAL_COLOR"))
    dynamodb_endpoint: str = Field(
        default="",
        validation_alias=_input_alias("dynamodb-endpoint", "BLUEGREEN_DYNAMODB_ENDPOINT"),
    )

    table_wait_attempts: int = Field(default=30, validation_alias="BLUEGREEN_TABLE_WAIT_ATTEMPTS")
    table_wait_seconds: float = Field(default=5.0, validation_alias="BLUEGREEN_TABLE_WAIT_SECONDS")

    actor: str = Field(default="github-actions", validation_alias="GITHUB_ACTOR")
    run_id: str = Field(default="unknown", validation_alias="GITHUB_RUN_ID")
    workflow: str = Field(default="unknown", validation_alias="GITHUB_WORKFLOW")
    output_path: str = Field(default="", validation_alias="GITHUB_OUTPUT")

    @field_validator(
        "aws_region",
        "table_name",
        "initial_color",
        "actor",
        "run_id",
        "workflow",
        mode="before",
    )
    @classmethod
    def _blank_uses_default(cls, value, info: ValidationInfo):
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return value.strip() if isinstance(value, str) else value

    @field_validator("table_wait_attempts")
    @classmethod
    def _positive_attempts(cls, value: int) -> int:
        return max(1, value)

    @field_validator("table_wait_seconds")
    @classmethod
    def _non_negative_wait(cls, value: float) -> float:
        return max(0.0, value)

    @property
    def provenance_metadata(self) -> dict[str, str]:
        return {
            "updated_by": self.actor,
            "run_id": self.run_id,
            "workflow": self.workflow,
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()
