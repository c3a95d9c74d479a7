"""CSV record source and snapshot sink.

Input rows look like ``type, client, tx, amount``; whitespace around every
field is ignored and the amount column may be left empty (or omitted) for
dispute, resolve and chargeback rows.
"""
import csv
from typing import Iterable, List, TextIO
import structlog
from pydantic import ValidationError

from errors import RecordDecodeError, RecordSourceError, SnapshotSinkError
from models import AccountSnapshot, TransactionRecord

logger = structlog.get_logger()

RECORD_FIELDS = ("type", "client", "tx", "amount")
SNAPSHOT_FIELDS = ("client", "available", "held", "total", "locked")


def load_records(path: str, encoding: str = "utf-8-sig") -> List[TransactionRecord]:
    """Decode every row of ``path``.

    The whole file is decoded before anything is returned, so a bad row
    anywhere aborts the run before a single record is applied.
    """
    try:
        with open(path, newline="", encoding=encoding) as file:
            records = _decode_rows(csv.reader(file), path)
    except UnicodeDecodeError as e:
        raise RecordSourceError(f"Cannot decode {path} as {encoding}: {e.reason}", path) from e
    except OSError as e:
        raise RecordSourceError(f"Cannot read {path}: {e.strerror or e}", path) from e
    except csv.Error as e:
        raise RecordSourceError(f"Malformed CSV in {path}: {e}", path) from e

    logger.info("Transaction records loaded", path=path, records=len(records))
    return records


def _decode_rows(reader, path: str) -> List[TransactionRecord]:
    header = None
    records: List[TransactionRecord] = []

    for row in reader:
        fields = [field.strip() for field in row]
        if not any(fields):
            continue

        if header is None:
            header = [field.lower() for field in fields]
            missing = [name for name in RECORD_FIELDS[:3] if name not in header]
            if missing:
                raise RecordSourceError(
                    f"{path} is missing header column(s): {', '.join(missing)}", path
                )
            continue

        if len(fields) > len(header):
            raise RecordDecodeError(
                f"expected at most {len(header)} fields, got {len(fields)}",
                path,
                reader.line_num
            )

        values = dict(zip(header, fields))
        try:
            records.append(TransactionRecord.model_validate(values))
        except ValidationError as e:
            raise RecordDecodeError(_describe(e), path, reader.line_num) from e

    if header is None:
        raise RecordSourceError(f"{path} has no header row", path)

    return records


def _describe(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(item) for item in detail["loc"])
        parts.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(parts)


def render_snapshots(snapshots: Iterable[AccountSnapshot]) -> List[List[str]]:
    rows = [list(SNAPSHOT_FIELDS)]
    for snapshot in snapshots:
        row = snapshot.to_row()
        rows.append([row[name] for name in SNAPSHOT_FIELDS])
    return rows


def write_snapshots(snapshots: Iterable[AccountSnapshot], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    try:
        rows = render_snapshots(snapshots)
    except ValueError as e:
        raise SnapshotSinkError(f"Cannot format account snapshots: {e}") from e

    try:
        writer.writerows(rows)
        stream.flush()
    except OSError as e:
        raise SnapshotSinkError(f"Cannot write account snapshots: {e.strerror or e}") from e
