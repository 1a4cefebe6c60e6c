import pytest

from expresshal.power import (
    BOOSTPULSE_INTERACTIVE,
    SCALING_GOVERNOR_PATH,
    PowerHal,
    PowerHint,
    sysfs_read,
    sysfs_write,
)

INTERACTIVE_DIR = "sys/devices/system/cpu/cpufreq/interactive/"
ONDEMAND_DIR = "sys/devices/system/cpu/cpufreq/ondemand/"


def make_file(root, relative, text=""):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


@pytest.fixture
def interactive_root(tmp_path):
    make_file(tmp_path, SCALING_GOVERNOR_PATH, "interactive\n")
    make_file(tmp_path, BOOSTPULSE_INTERACTIVE)
    make_file(tmp_path, INTERACTIVE_DIR + "min_sample_time")
    make_file(tmp_path, INTERACTIVE_DIR + "hispeed_freq")
    return tmp_path


def test_sysfs_read_limits_size(tmp_path):
    path = make_file(tmp_path, "value", "abcdefgh")
    assert sysfs_read(path, 5) == "abcd"


def test_sysfs_read_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        sysfs_read(tmp_path / "absent", 20)


def test_sysfs_write_round_trip(tmp_path):
    path = make_file(tmp_path, "value")
    assert sysfs_write(path, "42") is True
    assert path.read_text() == "42"


def test_sysfs_write_missing_does_not_create(tmp_path):
    path = tmp_path / "absent"
    assert sysfs_write(path, "1") is False
    assert not path.exists()


def test_read_scaling_governor_strips_newline(interactive_root):
    hal = PowerHal(interactive_root)
    assert hal.read_scaling_governor() == "interactive"
    assert hal.governor == "interactive"


def test_read_scaling_governor_missing(tmp_path):
    hal = PowerHal(tmp_path)
    with pytest.raises(OSError):
        hal.read_scaling_governor()
    assert hal.governor == ""


def test_init_configures_interactive(interactive_root):
    PowerHal(interactive_root).init()
    assert (interactive_root / (INTERACTIVE_DIR + "min_sample_time")).read_text() == "90000"
    assert (interactive_root / (INTERACTIVE_DIR + "hispeed_freq")).read_text() == "918000"


def test_init_configures_ondemand(tmp_path):
    make_file(tmp_path, SCALING_GOVERNOR_PATH, "ondemand\n")
    threshold = make_file(tmp_path, ONDEMAND_DIR + "up_threshold")
    PowerHal(tmp_path).init()
    assert threshold.read_text() == "90"


def test_cpu_boost_writes_duration(interactive_root):
    hal = PowerHal(interactive_root)
    hal.power_hint(PowerHint.CPU_BOOST, 500)
    assert (interactive_root / BOOSTPULSE_INTERACTIVE).read_text() == "500"


def test_interaction_default_duration(interactive_root):
    hal = PowerHal(interactive_root)
    hal.power_hint(PowerHint.INTERACTION)
    assert (interactive_root / BOOSTPULSE_INTERACTIVE).read_text() == "1"


def test_interaction_without_touch_boost(interactive_root):
    hal = PowerHal(interactive_root, touch_boost=False)
    hal.power_hint(PowerHint.INTERACTION)
    assert (interactive_root / BOOSTPULSE_INTERACTIVE).read_text() == ""


def test_vsync_does_nothing(interactive_root):
    hal = PowerHal(interactive_root)
    hal.power_hint(PowerHint.VSYNC)
    assert (interactive_root / BOOSTPULSE_INTERACTIVE).read_text() == ""
    assert hal.governor == ""


def test_boost_without_governor_file(tmp_path):
    hal = PowerHal(tmp_path)
    hal.power_hint(PowerHint.CPU_BOOST, 10)
    assert hal.governor == ""
    assert not (tmp_path / BOOSTPULSE_INTERACTIVE).exists()


def test_boost_with_ondemand_has_no_pulse(tmp_path):
    make_file(tmp_path, SCALING_GOVERNOR_PATH, "ondemand\n")
    hal = PowerHal(tmp_path)
    hal.power_hint(PowerHint.CPU_BOOST, 10)
    assert hal.governor == "ondemand"
    assert not (tmp_path / BOOSTPULSE_INTERACTIVE).exists()


def test_set_interactive_records_state(tmp_path):
    hal = PowerHal(tmp_path)
    hal.set_interactive(0)
    assert hal.interactive is False
    hal.set_interactive(1)
    assert hal.interactive is True