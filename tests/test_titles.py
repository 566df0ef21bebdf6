from storeshots.core.geometry import title_height
from storeshots.core.titles import generate_title_image, split_title_lines


def test_short_title_stays_on_one_line():
    assert split_title_lines("Home", 100, 600) == ("Home", "")


def test_long_title_wraps_greedily():
    # 600px at 100px font fits 10 estimated characters per line
    assert split_title_lines("Track your daily habits", 100, 600) == ("Track your", "daily habits")


def test_wrapped_lines_keep_every_word():
    text = "Organize all of your projects in one place"
    line1, line2 = split_title_lines(text, 130, 1000)
    assert f"{line1} {line2}" == text
    assert len(line1) <= 1000 // 78


def test_single_word_longer_than_budget_is_not_split():
    assert split_title_lines("Supercalifragilistic", 100, 600) == ("Supercalifragilistic", "")


def test_escaped_newline_forces_break():
    assert split_title_lines("Plan\\nyour week", 100, 2000) == ("Plan", "your week")


def test_real_newline_forces_break():
    assert split_title_lines("Plan\nyour\nweek", 100, 2000) == ("Plan", "your week")


def test_single_line_mode_drops_second_line():
    assert split_title_lines("Track your daily habits", 100, 600, max_lines=1) == ("Track your", "")
    assert split_title_lines("Plan\\nyour week", 100, 2000, max_lines=1) == ("Plan", "")


def test_title_image_height_follows_line_count():
    one = generate_title_image("Home", 20, "#ffffff", "#000000", 1, 200)
    two = generate_title_image("Plan\\nyour week", 20, "#ffffff", "#000000", 1, 200)

    assert one.lines == ("Home",)
    assert two.lines == ("Plan", "your week")
    assert one.image.size == (200, title_height(20, 1, 1))
    assert two.image.size == (200, title_height(20, 1, 2))
    assert one.height < two.height


def test_title_image_draws_text():
    title = generate_title_image("Home", 40, "#ffffff", "#000000", 2, 300)
    assert title.image.getchannel("A").getbbox() is not None


def test_markup_characters_count_toward_line_budget():
    # "Tea & Cake" is 10 characters but "Tea &amp; Cake" is 14
    assert split_title_lines("Tea & Cake", 100, 600) == ("Tea &", "Cake")
    assert split_title_lines("Tea and Cake", 100, 2000) == ("Tea and Cake", "")
