"""
Logging of the inspection, both for humans and for log parsers.

Most of the work is done per resource (e.g. listing the objects), and often
concurrently for hundreds of resources, so the log lines are interleaved.
For this, the per-resource messages are logged via `ResourceLogger`,
which carries the resource reference for the formatters: to prefix the text
messages or to add a structured field to the JSON messages.
"""
import copy
import enum
import logging
from typing import Any, Mapping, MutableMapping, Optional, Tuple

try:
    # python-json-logger>=3.1.0
    from pythonjsonlogger.core import RESERVED_ATTRS as _pjl_RESERVED_ATTRS
    from pythonjsonlogger.json import JsonFormatter as _pjl_JsonFormatter
except ImportError:
    # python-json-logger<3.1.0
    from pythonjsonlogger.jsonlogger import JsonFormatter as _pjl_JsonFormatter  # type: ignore
    from pythonjsonlogger.jsonlogger import RESERVED_ATTRS as _pjl_RESERVED_ATTRS  # type: ignore

from ownertree.helpers import typedefs
from ownertree.structs import references

DEFAULT_JSON_REFKEY = 'resource'
""" The field of JSON log records where the resource reference is put. """

SEVERITIES = [
    (logging.DEBUG, 'debug'),
    (logging.INFO, 'info'),
    (logging.WARNING, 'warn'),
    (logging.ERROR, 'error'),
]


class LogFormat(enum.Enum):
    """ Log formats, as specified on CLI. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = '-json-'  # only to detect the format, never used as one


def get_severity(levelno: int) -> str:
    for threshold, severity in SEVERITIES:
        if levelno <= threshold:
            return severity
    return 'fatal'


def get_prefix(ref: Mapping[str, Optional[str]]) -> str:
    namespace = ref.get('namespace')
    resource = ref.get('resource') or ''
    return f"[{namespace}/{resource}]" if namespace else f"[{resource}]"


class ResourceFormatter(logging.Formatter):
    """ A base class for all formatters aware of the resource references. """


class ResourceTextFormatter(ResourceFormatter):
    pass


class ResourceJsonFormatter(ResourceFormatter, _pjl_JsonFormatter):  # type: ignore
    """
    JSON records with the resource reference as a structured field.

    The raw ``k8s_ref`` attribute of the log records is never dumped as is,
    only under the configured key (``"resource"`` by default).
    """

    def __init__(self, *args: Any, refkey: Optional[str] = None, **kwargs: Any) -> None:
        reserved_attrs = set(kwargs.pop('reserved_attrs', _pjl_RESERVED_ATTRS))
        kwargs.update(reserved_attrs=reserved_attrs | {'k8s_ref'})
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, **kwargs)
        self._refkey: str = refkey or DEFAULT_JSON_REFKEY

    def add_fields(
            self,
            log_record: MutableMapping[str, object],
            record: logging.LogRecord,
            message_dict: MutableMapping[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        ref = getattr(record, 'k8s_ref', None)
        if ref is not None:
            log_record[self._refkey] = ref
        log_record.setdefault('severity', get_severity(record.levelno))


class ResourcePrefixingMixin(ResourceFormatter):
    """ Prepend the messages with the resource reference: ``[ns/plural.v1.group]``. """

    def format(self, record: logging.LogRecord) -> str:
        ref = getattr(record, 'k8s_ref', None)
        if ref is not None:
            record = copy.copy(record)  # the original record goes to other handlers as is
            record.msg = f"{get_prefix(ref)} {record.msg}"
        return super().format(record)


class ResourcePrefixingTextFormatter(ResourcePrefixingMixin, ResourceTextFormatter):
    pass


class ResourcePrefixingJsonFormatter(ResourcePrefixingMixin, ResourceJsonFormatter):
    pass


class ResourceLogger(typedefs.LoggerAdapter):
    """
    A logger of one resource being listed or read, in one namespace or cluster-wide.

    The namespace is dropped for cluster-scoped resources, exactly as in their URLs.
    """

    def __init__(
            self,
            *,
            resource: references.Resource,
            namespace: references.Namespace = None,
    ) -> None:
        ref = dict(resource=resource.qualified_name, namespace=resource.get_scope(namespace))
        super().__init__(logger, dict(k8s_ref=ref))

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> Tuple[str, MutableMapping[str, Any]]:
        # The adapter's extras would replace the call's extras; keep both instead.
        kwargs["extra"] = dict(self.extra or {}, **kwargs.get('extra', {}))
        return msg, kwargs


logger = logging.getLogger('ownertree.resources')


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: LogFormat = LogFormat.FULL,
        log_prefix: Optional[bool] = None,
        log_refkey: Optional[str] = None,
) -> None:
    log_level = 'DEBUG' if debug or verbose else 'WARNING' if quiet else 'INFO'
    handler = logging.StreamHandler()
    handler.setFormatter(make_formatter(log_format=log_format,
                                        log_prefix=log_prefix,
                                        log_refkey=log_refkey))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(log_level)

    # The low-level libraries are only shown in the debug mode.
    # The null handlers stop the last-resort handler from printing their warnings.
    for name in ['asyncio', 'aiohttp']:
        lowlevel = logging.getLogger(name)
        lowlevel.propagate = bool(debug)
        if not debug:
            lowlevel.handlers[:] = [logging.NullHandler()]


def make_formatter(
        log_format: LogFormat = LogFormat.FULL,
        log_prefix: Optional[bool] = None,
        log_refkey: Optional[str] = None,
) -> ResourceFormatter:
    """
    Make a formatter for the format: a predefined one or a custom ``%``-style string.

    The text formats are prefixed with the resource references by default,
    the JSON ones are not (the reference is a separate field there).
    """
    is_json = log_format is LogFormat.JSON
    prefixed = log_prefix if log_prefix is not None else not is_json
    if is_json:
        json_cls = ResourcePrefixingJsonFormatter if prefixed else ResourceJsonFormatter
        return json_cls(refkey=log_refkey)
    elif isinstance(log_format, (LogFormat, str)):
        fmt = log_format.value if isinstance(log_format, LogFormat) else log_format
        text_cls = ResourcePrefixingTextFormatter if prefixed else ResourceTextFormatter
        return text_cls(fmt)
    else:
        raise ValueError(f"Unsupported log format: {log_format!r}")
