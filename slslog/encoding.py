"""
Protobuf encoding of log writes.

The SLS write API takes a ``sls.LogGroup`` message (proto2):

    message Log {
        required uint32 Time = 1;
        message Content {
            required string Key = 1;
            required string Value = 2;
        }
        repeated Content Contents = 2;
        optional fixed32 TimeNs = 4;
    }

    message LogTag {
        required string Key = 1;
        required string Value = 2;
    }

    message LogGroup {
        repeated Log Logs = 1;
        optional string Reserved = 2;
        optional string Topic = 3;
        optional string Source = 4;
        repeated LogTag LogTags = 6;
    }

    message LogGroupList {
        repeated LogGroup logGroupList = 1;
    }

The message classes are built at import time from a FileDescriptorProto so no
generated ``_pb2`` module has to be shipped.
"""

import json
import math
import time
from typing import Any

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from .models import MILLISECOND_THRESHOLD, LogData, LogEntity

_FIELD = descriptor_pb2.FieldDescriptorProto


def _add_field(message, name: str, number: int, field_type: int, label: int, type_name: str | None = None):
    field = message.field.add()
    field.name = name
    field.number = number
    field.type = field_type
    field.label = label
    if type_name:
        field.type_name = type_name


def _build_schema() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = "sls/log_group.proto"
    file_proto.package = "sls"
    file_proto.syntax = "proto2"

    log = file_proto.message_type.add()
    log.name = "Log"
    content = log.nested_type.add()
    content.name = "Content"
    _add_field(content, "Key", 1, _FIELD.TYPE_STRING, _FIELD.LABEL_REQUIRED)
    _add_field(content, "Value", 2, _FIELD.TYPE_STRING, _FIELD.LABEL_REQUIRED)
    _add_field(log, "Time", 1, _FIELD.TYPE_UINT32, _FIELD.LABEL_REQUIRED)
    _add_field(log, "Contents", 2, _FIELD.TYPE_MESSAGE, _FIELD.LABEL_REPEATED, ".sls.Log.Content")
    _add_field(log, "TimeNs", 4, _FIELD.TYPE_FIXED32, _FIELD.LABEL_OPTIONAL)

    tag = file_proto.message_type.add()
    tag.name = "LogTag"
    _add_field(tag, "Key", 1, _FIELD.TYPE_STRING, _FIELD.LABEL_REQUIRED)
    _add_field(tag, "Value", 2, _FIELD.TYPE_STRING, _FIELD.LABEL_REQUIRED)

    group = file_proto.message_type.add()
    group.name = "LogGroup"
    _add_field(group, "Logs", 1, _FIELD.TYPE_MESSAGE, _FIELD.LABEL_REPEATED, ".sls.Log")
    _add_field(group, "Reserved", 2, _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL)
    _add_field(group, "Topic", 3, _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL)
    _add_field(group, "Source", 4, _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL)
    _add_field(group, "LogTags", 6, _FIELD.TYPE_MESSAGE, _FIELD.LABEL_REPEATED, ".sls.LogTag")

    group_list = file_proto.message_type.add()
    group_list.name = "LogGroupList"
    _add_field(group_list, "logGroupList", 1, _FIELD.TYPE_MESSAGE, _FIELD.LABEL_REPEATED, ".sls.LogGroup")

    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_schema().SerializeToString())

LogGroup = message_factory.GetMessageClass(_pool.FindMessageTypeByName("sls.LogGroup"))
LogGroupList = message_factory.GetMessageClass(_pool.FindMessageTypeByName("sls.LogGroupList"))


def split_timestamp(timestamp: int | float | None = None) -> tuple[int, int]:
    """
    Split an epoch timestamp into whole seconds and a nanosecond remainder.

    Values below 10^12 are already seconds and carry no remainder. Larger
    values are milliseconds. ``None`` means now.

    Returns:
        (seconds, nanoseconds)
    """
    if timestamp is None:
        timestamp = time.time_ns() // 1_000_000

    if timestamp < MILLISECOND_THRESHOLD:
        return int(timestamp), 0

    if isinstance(timestamp, int):
        return timestamp // 1000, (timestamp * 1_000_000) % 1_000_000_000

    seconds = math.floor(timestamp / 1000)
    nanoseconds = int((timestamp - seconds * 1000) * 1_000_000)
    return seconds, min(max(nanoseconds, 0), 999_999_999)


def format_content_value(value: Any) -> str:
    # Non-string values go over the wire as their JSON text
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def _fill_log(log, entity: LogEntity):
    seconds, nanoseconds = split_timestamp(entity.timestamp)
    log.Time = seconds
    log.TimeNs = entity.timestamp_ns_part if entity.timestamp_ns_part is not None else nanoseconds
    for key, value in entity.content.items():
        content = log.Contents.add()
        content.Key = key
        content.Value = format_content_value(value)


def build_log_group(data: LogData):
    """Map LogData onto a LogGroup message."""
    group = LogGroup()
    for entity in data.logs:
        _fill_log(group.Logs.add(), entity)

    for tag in data.tags or []:
        for key, value in tag.items():
            log_tag = group.LogTags.add()
            log_tag.Key = key
            log_tag.Value = value

    if data.topic:
        group.Topic = data.topic
    if data.source:
        group.Source = data.source

    return group


def encode_log_group(data: LogData) -> bytes:
    """Serialize LogData to the wire payload for a log write."""
    return build_log_group(data).SerializeToString()


def decode_log_group(payload: bytes):
    """Parse a wire payload back into a LogGroup message."""
    return LogGroup.FromString(payload)


def create_log(content: dict[str, Any], timestamp: int | float | None = None) -> LogEntity:
    """
    Build a LogEntity stamped with the current time.

    Without an explicit timestamp the entity gets the current time in
    milliseconds plus the full nanosecond remainder of the clock.
    """
    if timestamp is not None:
        return LogEntity(content=content, timestamp=timestamp)

    now_ns = time.time_ns()
    return LogEntity(
        content=content,
        timestamp=now_ns // 1_000_000,
        timestamp_ns_part=now_ns % 1_000_000_000,
    )
