from trip_sampling import config


def test_config_constants():
    assert config.DURATION_CEILING_S == 86_400
    assert config.Z_95 == 1.96
    assert len(config.DAYS_OF_WEEK) == 7
    assert set(config.TIME_OF_DAY_BANDS) == set(config.TIMES_OF_DAY)
    assert all(isinstance(s, int) for s in config.DEFAULT_SEEDS)


def test_report_defaults_live_under_reports_dir():
    assert config.DEFAULT_REPORT_CSV.parent == config.REPORTS_DIR
    assert config.REPORTS_DIR.parent == config.ROOT_DIR
