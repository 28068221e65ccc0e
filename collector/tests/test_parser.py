"""parser モジュールのユニットテスト."""

from decimal import Decimal
from pathlib import Path

from lottery_results.models import PrizeDefinition
from lottery_results.parser import (
    PRIZE_CATALOG,
    catalog_rank,
    extract_amount,
    extract_tickets,
    parse_result_text,
    segment_blocks,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def _numbers(category) -> list[str]:
    return [t.number for t in category.tickets]


class TestParseResultText:
    """parse_result_text のテスト."""

    def test_categories_in_document_order(self):
        """見出しの出現順に等級が並ぶこと（金額 0 の 8th は除外）."""
        categories = parse_result_text(_load_fixture("result_text.txt"))

        names = [c.name for c in categories]
        assert names == [
            "1st Prize", "Consolation", "2nd Prize", "3rd Prize",
            "4th Prize", "5th Prize", "9th Prize",
        ]

    def test_first_prize(self):
        categories = parse_result_text(_load_fixture("result_text.txt"))
        first = categories[0]

        assert first.amount == Decimal("10000000")
        assert len(first.tickets) == 1
        assert first.tickets[0].series == "DF"
        assert first.tickets[0].number == "869610"
        assert first.tickets[0].raw_text == "DF 869610"

    def test_consolation_alias_marker(self):
        """"Cons Prize" 見出しが Consolation として扱われること."""
        categories = parse_result_text(_load_fixture("result_text.txt"))
        cons = categories[1]

        assert cons.name == "Consolation"
        assert cons.amount == Decimal("8000")
        assert [t.series for t in cons.tickets] == ["DA", "DB", "DC", "DD", "DE", "DG"]

    def test_concatenated_numbers_are_deduplicated(self):
        """連結された番号が 4 桁ずつに分割され、重複が除去されること."""
        categories = parse_result_text(_load_fixture("result_text.txt"))
        fourth = categories[4]

        assert fourth.name == "4th Prize"
        assert _numbers(fourth) == ["0383", "0463", "0500", "1178", "2516"]
        assert all(t.series is None for t in fourth.tickets)

    def test_short_digit_runs_ignored(self):
        """"Page 1 of 2" のような短い数字列を拾わないこと."""
        categories = parse_result_text(_load_fixture("result_text.txt"))
        ninth = categories[-1]

        assert ninth.name == "9th Prize"
        assert _numbers(ninth) == ["9610"]

    def test_footer_ends_last_block(self):
        """フッター以降の数字が最後の等級に混ざらないこと."""
        categories = parse_result_text(_load_fixture("result_text.txt"))
        all_numbers = {t.number for c in categories for t in c.tickets}

        assert "2023" not in all_numbers
        assert "4567" not in all_numbers

    def test_no_markers(self):
        """見出しが無いテキストでは空リストを返すこと."""
        assert parse_result_text("Nothing to see here\n1234 5678") == []

    def test_empty_text(self):
        assert parse_result_text("") == []

    def test_block_without_tickets_dropped(self):
        text = "1st Prize Rs :10,000,000/-\n(no winner listed)\n"
        assert parse_result_text(text) == []

    def test_block_without_amount_dropped(self):
        text = "4th Prize\n0383 0463\n5th Prize Rs : 2,000\n3122\n"
        categories = parse_result_text(text)

        assert [c.name for c in categories] == ["5th Prize"]

    def test_four_digit_block_from_concatenated_run(self):
        categories = parse_result_text("4th Prize ... Rs : 500 ...\n038304630500")

        assert len(categories) == 1
        assert categories[0].amount == Decimal("500")
        assert _numbers(categories[0]) == ["0383", "0463", "0500"]

    def test_series_block_amount_with_separators(self):
        categories = parse_result_text("1st Prize ... Rs : 10,000,000 ...\nDF 869610")

        assert len(categories) == 1
        assert categories[0].amount == Decimal("10000000")
        assert categories[0].tickets[0].series == "DF"
        assert categories[0].tickets[0].number == "869610"

    def test_custom_catalog(self):
        catalog = (PrizeDefinition("Bumper", ("BUMPER",), has_series=True),)
        text = "BUMPER Rs: 250,000,000\nTH 123456\n1st Prize Rs: 100\nAB 654321"

        categories = parse_result_text(text, catalog)

        assert [c.name for c in categories] == ["Bumper"]
        # カタログ外の見出しは区切りにならない
        assert [t.number for t in categories[0].tickets] == ["123456", "654321"]


class TestSegmentBlocks:
    """segment_blocks のテスト."""

    def test_blocks_are_contiguous(self):
        text = "intro\n1st Prize Rs:1\nAA 111111\n2nd Prize Rs:1\nBB 222222\n"
        blocks = segment_blocks(text)

        assert [b.definition.name for b in blocks] == ["1st Prize", "2nd Prize"]
        assert blocks[0].end == blocks[1].start
        assert blocks[1].end == len(text)
        assert blocks[0].text.startswith("1st Prize")

    def test_earliest_marker_wins(self):
        """カタログ順ではなく出現位置順に区切ること."""
        text = "3rd Prize Rs:10\nAA 333333\n1st Prize Rs:99\nBB 111111\n"
        blocks = segment_blocks(text)

        assert [b.definition.name for b in blocks] == ["3rd Prize", "1st Prize"]

    def test_footer_is_boundary_only(self):
        text = "9th Prize Rs:50\n1234\nThe prize winners are advised to check.\n5678"
        blocks = segment_blocks(text)

        assert len(blocks) == 1
        assert "5678" not in blocks[0].text

    def test_no_markers(self):
        assert segment_blocks("plain text") == []


class TestExtractAmount:
    """extract_amount のテスト."""

    def test_marker_and_amount_on_same_line(self):
        definition = PRIZE_CATALOG[0]
        assert extract_amount("1st Prize Rs :75,00,000/-", definition) == Decimal("7500000")

    def test_case_insensitive(self):
        definition = PRIZE_CATALOG[4]
        assert extract_amount("4th prize rs: 5,000", definition) == Decimal("5000")

    def test_zero_amount(self):
        assert extract_amount("4th Prize Rs : 0", PRIZE_CATALOG[4]) is None

    def test_separators_only(self):
        assert extract_amount("4th Prize Rs : ,,", PRIZE_CATALOG[4]) is None

    def test_missing_amount(self):
        assert extract_amount("4th Prize\nRs : 5000", PRIZE_CATALOG[4]) is None


class TestExtractTickets:
    """extract_tickets のテスト."""

    def test_header_line_skipped(self):
        tickets = extract_tickets("4th Prize Rs :5000\n1234", has_series=False)
        assert [t.number for t in tickets] == ["1234"]

    def test_series_header_line_skipped(self):
        """見出し行にある "XX 123456" 形式の文字列を当選番号として読まないこと."""
        block = "1st Prize Rs :10,000,000 KN 562001\nDF 869610"

        tickets = extract_tickets(block, has_series=True)

        assert [t.raw_text for t in tickets] == ["DF 869610"]

    def test_trailing_remainder_dropped(self):
        tickets = extract_tickets("header\n1234567", has_series=False)
        assert [t.number for t in tickets] == ["1234"]

    def test_series_without_space(self):
        tickets = extract_tickets("header\nDF869610 df 123456", has_series=True)

        # 英字は大文字のみ対象
        assert [t.raw_text for t in tickets] == ["DF 869610"]

    def test_series_duplicates_removed(self):
        tickets = extract_tickets("header\nDF 869610\nDF869610", has_series=True)
        assert len(tickets) == 1


def test_catalog_rank():
    assert catalog_rank("1st Prize") == 0
    assert catalog_rank("Consolation") == 1
    assert catalog_rank("Unknown") == len(PRIZE_CATALOG)
