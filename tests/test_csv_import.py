from cardbinder.parsers.csv_import import (
    detect_columns,
    detect_header,
    ingest_csv,
    parse_condition,
    parse_csv_line,
    parse_finish,
    parse_quantity,
    parse_set_name,
)


class TestParseCsvLine:
    def test_splits_and_strips(self) -> None:
        assert parse_csv_line(" 4 , Lightning Bolt ,M10") == ["4", "Lightning Bolt", "M10"]

    def test_comma_inside_quotes_does_not_split(self) -> None:
        assert parse_csv_line('3,"Fire, Ice",MH2') == ["3", "Fire, Ice", "MH2"]

    def test_doubled_quote_is_literal(self) -> None:
        assert parse_csv_line('1,"The ""Ur"" Dragon"') == ["1", 'The "Ur" Dragon']

    def test_apostrophe_is_ordinary(self) -> None:
        assert parse_csv_line("1,Urza's Saga") == ["1", "Urza's Saga"]


class TestParseQuantity:
    def test_plain_number(self) -> None:
        assert parse_quantity("4") == 4

    def test_x_suffix_and_prefix(self) -> None:
        assert parse_quantity("4x") == 4
        assert parse_quantity("x2") == 2
        assert parse_quantity("3X") == 3

    def test_unparsable_defaults_to_one(self) -> None:
        assert parse_quantity("") == 1
        assert parse_quantity(None) == 1
        assert parse_quantity("many") == 1
        assert parse_quantity("-3") == 1

    def test_zero_becomes_one(self) -> None:
        assert parse_quantity("0") == 1


class TestParseFinishAndSet:
    def test_foil_only_when_cell_says_foil(self) -> None:
        assert parse_finish("foil") == "foil"
        assert parse_finish(" FOIL ") == "foil"
        assert parse_finish("") == "nonfoil"
        assert parse_finish("yes") == "nonfoil"
        assert parse_finish(None) == "nonfoil"

    def test_set_name_strips_parentheses(self) -> None:
        assert parse_set_name("(M21)") == "M21"
        assert parse_set_name("  Double Masters 2022 ") == "Double Masters 2022"
        assert parse_set_name(None) == ""

    def test_condition_long_forms_map_to_codes(self) -> None:
        assert parse_condition("Near Mint") == "NM"
        assert parse_condition("lightly-played") == "LP"
        assert parse_condition("  Heavily   Played ") == "HP"
        assert parse_condition("dmg") == "DMG"

    def test_condition_blank_and_unknown(self) -> None:
        assert parse_condition("") == "NM"
        assert parse_condition(None) == "NM"
        assert parse_condition("Graded 9.5") == "Graded 9.5"


class TestDetectHeader:
    def test_header_words(self) -> None:
        assert detect_header(["Quantity", "Name"]) is True
        assert detect_header(["Card Name", "Set", "Qty"]) is True

    def test_quantity_first_cell_is_data(self) -> None:
        assert detect_header(["4", "Lightning Bolt"]) is False

    def test_card_names_containing_header_words_are_data(self) -> None:
        """'Cardboard Carapace' contains 'card' but is not a header cell."""
        assert detect_header(["1", "Cardboard Carapace"]) is False

    def test_non_quantity_first_cell_is_header(self) -> None:
        assert detect_header(["Lightning Bolt", "4"]) is True


class TestDetectColumns:
    def test_columns_in_any_order(self) -> None:
        columns = detect_columns(["Card Name", "Set Name", "Qty", "Foil"])

        assert columns["name"] == 0
        assert columns["set"] == 1
        assert columns["quantity"] == 2
        assert columns["finish"] == 3
        assert "condition" not in columns

    def test_exact_name_header_wins_over_set_name(self) -> None:
        columns = detect_columns(["Set Name", "Name", "Count"])

        assert columns["name"] == 1
        assert columns["set"] == 0
        assert columns["quantity"] == 2

    def test_each_column_claimed_once(self) -> None:
        columns = detect_columns(["Quantity", "Name", "Edition", "Condition", "Notes"])

        assert sorted(columns.values()) == [0, 1, 2, 3, 4]


class TestIngestCsv:
    def test_header_with_two_rows(self) -> None:
        result = ingest_csv("Quantity,Name\n4,Lightning Bolt\n2,Counterspell\n")

        assert result.structural_failure is False
        assert result.failures == []
        assert [(row.quantity, row.name) for row in result.rows] == [
            (4, "Lightning Bolt"),
            (2, "Counterspell"),
        ]
        assert [row.row_number for row in result.rows] == [2, 3]

    def test_headerless_rows_use_default_order(self) -> None:
        result = ingest_csv("4,Lightning Bolt,M10,lp\n2,Counterspell")

        assert len(result.rows) == 2
        bolt = result.rows[0]
        assert bolt.row_number == 1
        assert bolt.name == "Lightning Bolt"
        assert bolt.set_name == "M10"
        assert bolt.condition == "LP"
        assert result.rows[1].condition == "NM"

    def test_full_scanner_row(self, sample_scanner_csv: str) -> None:
        result = ingest_csv(sample_scanner_csv)

        assert len(result.rows) == 2
        fire_ice = result.rows[1]
        assert fire_ice.name == "Fire // Ice"
        assert fire_ice.set_name == "Apocalypse"
        assert fire_ice.finish == "foil"
        assert fire_ice.notes == "trade bait"
        assert result.rows[0].finish == "nonfoil"

    def test_missing_name_column_is_structural(self) -> None:
        result = ingest_csv("Set,Qty\nM10,4\n")

        assert result.structural_failure is True
        assert result.rows == []
        assert result.errors == ["Card name column not found in header"]

    def test_missing_quantity_column_is_structural(self) -> None:
        result = ingest_csv("Name,Set\nLightning Bolt,M10\n")

        assert result.structural_failure is True
        assert result.rows == []
        assert result.errors == ["Quantity column not found in header"]

    def test_row_without_name_is_skipped(self) -> None:
        result = ingest_csv("Quantity,Name\n4,\n2,Counterspell\n")

        assert [row.name for row in result.rows] == ["Counterspell"]
        assert result.errors == ["Row 2: Card name is required"]
        assert result.failures[0].content == "4,"

    def test_blank_lines_skipped_and_numbering_kept(self) -> None:
        result = ingest_csv("Quantity,Name\r\n\r\n4,Lightning Bolt\r\n")

        assert len(result.rows) == 1
        assert result.rows[0].row_number == 3
        assert result.failures == []

    def test_declared_header_flag_overrides_detection(self) -> None:
        result = ingest_csv("4,Lightning Bolt\n2,Counterspell", has_header=False)

        assert len(result.rows) == 2

    def test_empty_input(self) -> None:
        result = ingest_csv("  \n\n")

        assert result.structural_failure is True
        assert result.rows == []
        assert result.errors == ["CSV must have at least one data row"]
