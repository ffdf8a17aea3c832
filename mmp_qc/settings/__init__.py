from mmp_qc.settings.main import QcSettings, load_settings, qc_settings  # noqa
