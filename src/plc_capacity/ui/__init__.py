"""
UI package (Streamlit).

The UI stays separated from the calculation. It edits state through
CalculatorSession and only visualizes the structured results.
"""
