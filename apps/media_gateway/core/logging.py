"""
Structured Logging Configuration (ECS-based)

stdout 으로 출력하며 LOG_FORMAT=json 이면 ECS JSON, text 이면 사람이 읽는 포맷.
logger 호출의 extra 필드는 두 포맷 모두에서 민감 키가 마스킹된 채로 붙습니다.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from media_gateway.core.constants import (
    DEFAULT_ENVIRONMENT,
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    ECS_VERSION,
    ENV_KEY_ENVIRONMENT,
    ENV_KEY_LOG_FORMAT,
    ENV_KEY_LOG_LEVEL,
    EXCLUDED_LOG_RECORD_ATTRS,
    MASK_MIN_LENGTH,
    MASK_PLACEHOLDER,
    MASK_PRESERVE_PREFIX,
    MASK_PRESERVE_SUFFIX,
    NOISY_LOGGERS,
    SENSITIVE_FIELD_PATTERNS,
    SERVICE_NAME,
    SERVICE_VERSION,
)

_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _masked(key: str, value: Any) -> Any:
    if any(pattern in key.lower() for pattern in SENSITIVE_FIELD_PATTERNS):
        text = "" if value is None else str(value)
        if len(text) <= MASK_MIN_LENGTH:
            return MASK_PLACEHOLDER
        return f"{text[:MASK_PRESERVE_PREFIX]}...{text[-MASK_PRESERVE_SUFFIX:]}"
    if isinstance(value, dict):
        return mask_sensitive_data(value)
    if isinstance(value, (list, tuple)):
        return [mask_sensitive_data(item) if isinstance(item, dict) else item for item in value]
    return value


def mask_sensitive_data(data: dict[str, Any]) -> dict[str, Any]:
    """토큰/시크릿/private key 류 키의 값을 앞뒤 일부만 남기고 가립니다."""
    if not isinstance(data, dict):
        return data
    return {key: _masked(str(key), value) for key, value in data.items()}


def _record_labels(record: logging.LogRecord) -> dict[str, Any]:
    labels = {
        key: value
        for key, value in record.__dict__.items()
        if key not in EXCLUDED_LOG_RECORD_ATTRS and not key.startswith("_")
    }
    return mask_sensitive_data(labels)


class ECSJsonFormatter(logging.Formatter):
    """Elastic Common Schema (ECS) 기반 JSON 포매터"""

    def __init__(
        self,
        service_name: str = SERVICE_NAME,
        service_version: str = SERVICE_VERSION,
        environment: str = DEFAULT_ENVIRONMENT,
    ):
        super().__init__()
        self._service_fields = {
            "service.name": service_name,
            "service.version": service_version,
            "service.environment": environment,
        }

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        document: dict[str, Any] = {
            "@timestamp": created.isoformat(timespec="milliseconds"),
            "message": record.getMessage(),
            "log.level": record.levelname.lower(),
            "log.logger": record.name,
            "ecs.version": ECS_VERSION,
            **self._service_fields,
        }

        labels = _record_labels(record)
        request_id = labels.get("request_id")
        if request_id:
            document["http.request.id"] = request_id
        if labels:
            document["labels"] = labels

        exc_type, exc_value, _ = record.exc_info or (None, None, None)
        if exc_type is not None:
            document["error.type"] = exc_type.__name__
            document["error.message"] = str(exc_value)
            document["error.stack_trace"] = self.formatException(record.exc_info)

        return json.dumps(document, ensure_ascii=False, default=str)


class LabelledTextFormatter(logging.Formatter):
    """로컬 개발용 텍스트 포맷. extra 필드는 key=value 로 덧붙입니다."""

    def __init__(self) -> None:
        super().__init__(_TEXT_FORMAT, datefmt=_TEXT_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        labels = _record_labels(record)
        if not labels:
            return line
        suffix = " ".join(f"{key}={value}" for key, value in labels.items())
        return f"{line} | {suffix}"


def _current_environment() -> str:
    return os.getenv(ENV_KEY_ENVIRONMENT) or os.getenv("NODE_ENV") or DEFAULT_ENVIRONMENT


def configure_logging(
    service_name: str = SERVICE_NAME,
    service_version: str = SERVICE_VERSION,
    log_level: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> None:
    """root logger 를 stdout 핸들러 하나로 재구성합니다."""
    level_name = (log_level or os.getenv(ENV_KEY_LOG_LEVEL, DEFAULT_LOG_LEVEL)).upper()
    level = getattr(logging, level_name, logging.INFO)
    if json_format is None:
        json_format = os.getenv(ENV_KEY_LOG_FORMAT, DEFAULT_LOG_FORMAT) == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(
            ECSJsonFormatter(service_name, service_version, _current_environment())
        )
    else:
        handler.setFormatter(LabelledTextFormatter())

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
