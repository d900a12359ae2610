import unittest

from condition_list import Condition, Connective, ValueKind
from ea_prompts import CLOSING_INSTRUCTION, STRATEGY_PREAMBLE
from indicators import BollingerBandsIndicator, MACDIndicator, RSIIndicator, StochasticIndicator
from strategy_builder import StrategyBuilder
from strategy_prompt_compiler import (
    RiskParameters,
    StrategyMetadata,
    compile_strategy_prompt,
    format_number,
)


def build_metadata():
    return StrategyMetadata(name="RsiBounce", symbol="BTCUSDT", timeframe="H1")


def build_risk():
    return RiskParameters(stop_loss="50", take_profit="100", lot_size="0.01")


def compile_parts(indicators=(), entry=(), exit=()):
    return compile_strategy_prompt(indicators, entry, exit, build_risk(), build_metadata())


class StrategyPromptCompilerTests(unittest.TestCase):
    def test_empty_model_keeps_every_section(self):
        prompt = compile_parts()
        self.assertEqual(prompt.count("- None"), 3)
        for heading in (
            "**Expert Advisor Name:** RsiBounce",
            "**Symbol:** BTCUSDT",
            "**Timeframe:** H1",
            "**Indicators:**",
            "**Entry Conditions (for a BUY trade):**",
            "**Exit Conditions (to close a BUY trade):**",
            "**Risk Management:**",
        ):
            self.assertIn(heading, prompt)
        self.assertTrue(prompt.startswith(STRATEGY_PREAMBLE))
        self.assertTrue(prompt.endswith(CLOSING_INSTRUCTION))

    def test_sections_follow_fixed_order(self):
        prompt = compile_parts()
        positions = [
            prompt.index("**Expert Advisor Name:**"),
            prompt.index("**Indicators:**"),
            prompt.index("**Entry Conditions"),
            prompt.index("**Exit Conditions"),
            prompt.index("**Risk Management:**"),
            prompt.index(CLOSING_INSTRUCTION),
        ]
        self.assertEqual(positions, sorted(positions))

    def test_rsi_price_example(self):
        prompt = compile_parts(
            indicators=[RSIIndicator(period=14)],
            entry=[Condition(subject="Price_Close", operator=">", value_kind=ValueKind.LITERAL, value=50000)],
        )
        lines = prompt.splitlines()
        self.assertIn("- RSI_1: Period=14", lines)
        self.assertIn("    - Price (Close) > 50000", lines)

        exit_block = prompt.split("**Exit Conditions (to close a BUY trade):**\n", 1)[1]
        self.assertEqual(exit_block.splitlines()[0].strip(), "- None")

    def test_multi_parameter_indicator_lines(self):
        prompt = compile_parts(
            indicators=[MACDIndicator(), BollingerBandsIndicator(deviation=2.5), StochasticIndicator(), MACDIndicator(fast=5)],
        )
        lines = prompt.splitlines()
        self.assertIn("- MACD_1: Fast=12, Slow=26, Signal=9", lines)
        self.assertIn("- BollingerBands_1: Period=20, Deviation=2.5", lines)
        self.assertIn("- Stochastic_1: %K=5, %D=3, Slowing=3", lines)
        self.assertIn("- MACD_2: Fast=5, Slow=26, Signal=9", lines)

    def test_connectives_and_indicator_values(self):
        prompt = compile_parts(
            indicators=[MACDIndicator(), RSIIndicator()],
            entry=[
                Condition(subject="MACD_1_Main", operator="crosses above", value_kind=ValueKind.INDICATOR, value_ref="MACD_1_Signal"),
                Condition(subject="RSI_1", operator="<", value=30, connective=Connective.AND),
                Condition(subject="Price_Open", operator=">=", value=1.25, connective=Connective.OR),
            ],
        )
        lines = prompt.splitlines()
        start = lines.index("**Entry Conditions (for a BUY trade):**")
        self.assertEqual(
            lines[start + 1:start + 4],
            [
                "    - MACD #1 (Main) crosses above MACD #1 (Signal)",
                "    - AND RSI #1 < 30",
                "    - OR Price (Open) >= 1.25",
            ],
        )

    def test_risk_management_is_verbatim(self):
        prompt = compile_parts()
        self.assertIn("- Stop Loss: 50 pips\n- Take Profit: 100 pips\n- Lot Size: 0.01", prompt)

    def test_numeric_risk_values_are_accepted(self):
        risk = RiskParameters(stop_loss=30, take_profit=60, lot_size=0.1)
        self.assertEqual(risk.lot_size, "0.1")

    def test_compilation_is_deterministic(self):
        indicators = [RSIIndicator(), BollingerBandsIndicator()]
        entry = [Condition(subject="BollingerBands_1_Lower", operator=">", value_kind=ValueKind.INDICATOR, value_ref="RSI_1")]
        self.assertEqual(compile_parts(indicators, entry), compile_parts(indicators, entry))

    def test_dangling_reference_raises(self):
        with self.assertRaises(ValueError):
            compile_parts(indicators=[RSIIndicator()], entry=[Condition(subject="EMA_1")])
        with self.assertRaises(ValueError):
            compile_parts(
                indicators=[RSIIndicator()],
                exit=[Condition(value_kind=ValueKind.INDICATOR, value_ref="Price_Close")],
            )

    def test_missing_connective_on_later_row_raises(self):
        with self.assertRaises(ValueError):
            compile_parts(
                indicators=[RSIIndicator()],
                entry=[Condition(subject="RSI_1", value=30), Condition(subject="Price_Close", value=100)],
            )

    def test_literal_value_ignores_value_ref(self):
        prompt = compile_parts(
            indicators=[RSIIndicator()],
            entry=[Condition(subject="RSI_1", operator=">", value=70, value_ref="RSI_1")],
        )
        self.assertIn("    - RSI #1 > 70", prompt.splitlines())

    def test_builder_compile_matches_direct_compilation(self):
        builder = StrategyBuilder()
        builder.indicator_added("RSI")
        builder.condition_added("entry")
        builder.condition_field_changed("entry", 0, "value", 50000)
        direct = compile_parts(
            indicators=[RSIIndicator()],
            entry=[Condition(subject="Price_Close", value=50000, value_ref="RSI_1")],
        )
        self.assertEqual(builder.compile(build_metadata(), build_risk()), direct)

    def test_format_number(self):
        self.assertEqual(format_number(2.0), "2")
        self.assertEqual(format_number(2.5), "2.5")
        self.assertEqual(format_number(14), "14")
        self.assertEqual(format_number(-3.0), "-3")


if __name__ == "__main__":
    unittest.main()
