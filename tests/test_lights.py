import pytest

from expresshal.lights import (
    BUTTON_FILE,
    LCD_FILE,
    LED_BLINK,
    NOTIFICATION_FILE,
    FlashMode,
    LedConfig,
    LightState,
    LightsModule,
    format_blink,
    is_lit,
    rgb_to_brightness,
)


@pytest.fixture
def root(tmp_path):
    for relative in (LCD_FILE, BUTTON_FILE, NOTIFICATION_FILE, LED_BLINK):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")
    return tmp_path


def first_line(root, relative):
    return (root / relative).read_text().splitlines()[0]


def test_is_lit_ignores_alpha():
    assert is_lit(LightState(color=0xFF000000)) is False
    assert is_lit(LightState(color=0x00000001)) is True


def test_rgb_to_brightness_extremes():
    assert rgb_to_brightness(LightState(color=0xFF000000)) == 0
    assert rgb_to_brightness(LightState(color=0xFFFFFFFF)) == 255


def test_rgb_to_brightness_green_brighter_than_blue():
    green = rgb_to_brightness(LightState(color=0x0000FF00))
    blue = rgb_to_brightness(LightState(color=0x000000FF))
    assert green > blue


def test_format_blink_values():
    assert format_blink(LedConfig(0x00FF0000, 500, 1000)) == "0x00ff0000 500 1000\n"


def test_format_blink_off():
    assert format_blink(None) == "0x00000000 0 0\n"


def test_format_blink_too_long():
    with pytest.raises(ValueError):
        format_blink(LedConfig(0xFFFFFFFF, -2147483648, -2147483648))


def test_backlight_writes_brightness(root):
    lights = LightsModule(root)
    lights.set_backlight(LightState(color=0xFF000000))
    assert first_line(root, LCD_FILE) == "0"


def test_buttons_write_low_byte(root):
    lights = LightsModule(root)
    lights.open("buttons")(LightState(color=0xFFFFFF07))
    assert first_line(root, BUTTON_FILE) == "7"


def test_missing_file_raises(tmp_path):
    lights = LightsModule(tmp_path)
    with pytest.raises(FileNotFoundError):
        lights.set_backlight(LightState(color=0xFFFFFFFF))


def test_open_unknown_light(root):
    with pytest.raises(ValueError):
        LightsModule(root).open("keyboard")


def test_open_battery_needs_multi_color_led(root):
    with pytest.raises(ValueError):
        LightsModule(root).open("battery")


def test_open_battery_with_led(root):
    lights = LightsModule(root, multi_color_led=True)
    assert lights.open("battery") == lights.set_battery


def test_conflicting_options():
    with pytest.raises(ValueError):
        LightsModule("/", generic_bln=True, multi_color_led=True)


def test_notifications_without_support(root):
    with pytest.raises(ValueError):
        LightsModule(root).set_notifications(LightState(color=0xFFFFFFFF))


def test_generic_bln_notification(root):
    lights = LightsModule(root, generic_bln=True)
    lights.set_notifications(LightState(color=0x00FF0000))
    assert first_line(root, NOTIFICATION_FILE) == "1"
    lights.set_notifications(LightState(color=0xFF000000))
    assert first_line(root, NOTIFICATION_FILE) == "0"


def test_led_priority(root):
    lights = LightsModule(root, multi_color_led=True)
    lights.set_notifications(
        LightState(color=0x0000FF00, flash_mode=FlashMode.TIMED, flash_on_ms=500, flash_off_ms=1000)
    )
    assert first_line(root, LED_BLINK) == "0x0000ff00 500 1000"
    assert lights.current_led == 1

    lights.set_battery(LightState(color=0x00FF0000))
    assert first_line(root, LED_BLINK) == "0x0000ff00 500 1000"
    assert lights.current_led == 1

    lights.set_notifications(LightState(color=0))
    assert first_line(root, LED_BLINK) == "0x00ff0000 0 0"
    assert lights.current_led == 0

    lights.set_battery(LightState(color=0))
    assert first_line(root, LED_BLINK) == "0x00000000 0 0"
    assert lights.current_led == -1


def test_attention_hardware_short_pulse_is_solid(root):
    lights = LightsModule(root, multi_color_led=True)
    lights.set_attention(
        LightState(color=0x00FF0000, flash_mode=FlashMode.HARDWARE, flash_on_ms=3, flash_off_ms=0)
    )
    assert first_line(root, LED_BLINK) == "0x00ff0000 0 0"
    assert lights.current_led == 2


def test_attention_stop_flashing_turns_off(root):
    lights = LightsModule(root, multi_color_led=True)
    lights.set_attention(
        LightState(color=0x000000FF, flash_mode=FlashMode.TIMED, flash_on_ms=100, flash_off_ms=200)
    )
    lights.set_attention(LightState(color=0x000000FF, flash_mode=FlashMode.NONE))
    assert first_line(root, LED_BLINK) == "0x00000000 0 0"
    assert lights.current_led == -1


def test_invalid_flash_mode(root):
    lights = LightsModule(root, multi_color_led=True)
    with pytest.raises(ValueError):
        lights.set_battery(LightState(color=0x00FF0000, flash_mode=7))
    assert lights.current_led == -1
    assert (root / LED_BLINK).read_text() == ""