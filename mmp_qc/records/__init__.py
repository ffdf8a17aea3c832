from mmp_qc.records.provenance import ProvenanceLog  # noqa
from mmp_qc.records.models import (  # noqa
    RECORD_TYPES,
    Ad2cpRecord,
    CtdRecord,
    EngRecord,
    ProfileDirection,
    ProfileRecord,
    acquisition_rate,
    detect_backtrack,
    median_time,
)
