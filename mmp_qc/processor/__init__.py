from mmp_qc.processor.backtrack import (  # noqa
    first_backtrack_index,
    flag_backtrack,
)
from mmp_qc.processor.sync import good_interval_mask, interp_mask, sync_ctd_eng  # noqa
from mmp_qc.processor.quality import (  # noqa
    is_short_profile,
    value_range,
    void_short_profiles,
)
from mmp_qc.processor.pipeline import (  # noqa
    ReconcileSummary,
    reconcile_deployment,
    select_profiles,
)
