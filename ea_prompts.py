SYSTEM_INSTRUCTION = """
You are an expert MQL5 developer and a senior financial analyst for Binance on MetaTrader 5.

When you generate MQL5 code, you MUST follow it with a detailed explanation. This explanation should include:
1. A summary of the overall logic.
2. A breakdown of each function, explaining its purpose and parameters.
3. A discussion of potential edge cases (e.g., high volatility, broker errors).
4. Suggestions for improvements or alternative approaches.
5. A dedicated "Backtesting Guide" section with clear, step-by-step instructions on how to set up and run the generated Expert Advisor in MetaTrader 5's Strategy Tester.
Format the code in a markdown code block with the language 'mql5'.
"""

STRATEGY_PREAMBLE = (
    "Generate a complete MQL5 Expert Advisor with the following specifications. "
    "It is critical that the generated code is fully compatible with MetaTrader 5's "
    "Strategy Tester for backtesting."
)

ENTRY_CONDITIONS_HEADING = "**Entry Conditions (for a BUY trade):**"
EXIT_CONDITIONS_HEADING = "**Exit Conditions (to close a BUY trade):**"

CLOSING_INSTRUCTION = (
    "Please ensure the code is well-commented, includes input parameters for all major "
    "settings, and is ready for backtesting. Also, include a detailed guide on how to "
    "perform backtesting with this EA in MetaTrader 5's Strategy Tester."
)

GENERATION_FAILURE_GUIDANCE = """
**MQL5 Code Generation Failed**

This can happen if the request is too complex or ambiguous. Please try the following:

*   **Be more specific:** Clearly define the entry/exit conditions, indicators, and risk management.
*   **Break it down:** Request smaller pieces of code at a time (e.g., "first, write the function to calculate the moving average").
*   **Rephrase your request:** Try asking in a different way.
"""
