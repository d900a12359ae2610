import unittest

from strategy_form_schema import assert_valid_strategy_form, validate_strategy_form


def build_valid_form():
    return {
        "metadata": {"name": "BandsRevert", "symbol": "ETHUSDT", "timeframe": "M30"},
        "risk": {"stop_loss": "25", "take_profit": "50", "lot_size": "0.1"},
        "indicators": [
            {"kind": "BollingerBands", "period": 20, "deviation": 2.5},
            {"kind": "Stochastic"},
        ],
        "entry_conditions": [
            {
                "subject": "Price_Close",
                "operator": "<",
                "value_kind": "indicator",
                "value_ref": "BollingerBands_1_Lower",
            },
            {
                "subject": "Stochastic_1_Main",
                "operator": "crosses above",
                "value_kind": "indicator",
                "value_ref": "Stochastic_1_Signal",
                "connective": "OR",
            },
        ],
        "exit_conditions": [
            {"subject": "Price_Open", "operator": ">=", "value_kind": "literal", "value": 3200.5},
        ],
    }


class StrategyFormSchemaTests(unittest.TestCase):
    def test_valid_form_passes(self):
        valid, errors = validate_strategy_form(build_valid_form())
        self.assertTrue(valid, msg=errors)
        self.assertEqual(errors, [])

    def test_non_object_root(self):
        valid, errors = validate_strategy_form([])
        self.assertFalse(valid)
        self.assertEqual(errors[0]["path"], "root")

    def test_unknown_indicator_kind(self):
        form = build_valid_form()
        form["indicators"].append({"kind": "ATR"})
        valid, errors = validate_strategy_form(form)
        self.assertFalse(valid)
        self.assertTrue(any(e["path"] == "indicators[2].kind" for e in errors))

    def test_fractional_integral_parameter(self):
        form = build_valid_form()
        form["indicators"][0]["period"] = 20.5
        valid, errors = validate_strategy_form(form)
        self.assertFalse(valid)
        self.assertTrue(any(e["path"] == "indicators[0].period" for e in errors))

    def test_price_field_is_not_a_valid_value_reference(self):
        form = build_valid_form()
        form["entry_conditions"][0]["value_ref"] = "Price_Open"
        valid, errors = validate_strategy_form(form)
        self.assertFalse(valid)
        self.assertTrue(any(e["path"] == "entry_conditions[0].value_ref" for e in errors))

    def test_reference_uses_per_kind_numbering(self):
        form = build_valid_form()
        form["exit_conditions"][0]["subject"] = "Stochastic_2_Main"
        valid, errors = validate_strategy_form(form)
        self.assertFalse(valid)
        self.assertTrue(any(e["path"] == "exit_conditions[0].subject" for e in errors))

    def test_reference_ids_match_derived_catalog(self):
        form = build_valid_form()
        form["indicators"] = [{"kind": "MACD"}, {"kind": "RSI"}, {"kind": "MACD"}]
        form["entry_conditions"] = [
            {"subject": "MACD_2_Main", "operator": ">", "value_kind": "indicator", "value_ref": "RSI_1"},
            {"subject": "Price_Close", "operator": ">", "value_kind": "indicator", "value_ref": "MACD_2_Signal", "connective": "AND"},
        ]
        form["exit_conditions"] = [{"subject": "RSI_2", "operator": "<", "value": 30}]
        valid, errors = validate_strategy_form(form)
        self.assertFalse(valid)
        self.assertEqual([e["path"] for e in errors], ["exit_conditions[0].subject"])

    def test_first_condition_connective_is_rejected(self):
        form = build_valid_form()
        form["exit_conditions"][0]["connective"] = "AND"
        valid, errors = validate_strategy_form(form)
        self.assertFalse(valid)
        self.assertTrue(any(e["path"] == "exit_conditions[0].connective" for e in errors))

    def test_missing_metadata_field(self):
        form = build_valid_form()
        form["metadata"]["symbol"] = "  "
        valid, errors = validate_strategy_form(form)
        self.assertFalse(valid)
        self.assertTrue(any(e["path"] == "metadata.symbol" for e in errors))

    def test_assert_valid_strategy_form_raises(self):
        form = build_valid_form()
        form["entry_conditions"][1]["operator"] = "between"
        with self.assertRaises(ValueError):
            assert_valid_strategy_form(form)


if __name__ == "__main__":
    unittest.main()
