from mmp_qc.records import (  # noqa
    Ad2cpRecord,
    CtdRecord,
    EngRecord,
    ProfileDirection,
    ProfileRecord,
    ProvenanceLog,
)
from mmp_qc.processor import (  # noqa
    flag_backtrack,
    reconcile_deployment,
    sync_ctd_eng,
    void_short_profiles,
)
