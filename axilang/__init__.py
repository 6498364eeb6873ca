""" AxiLang: a small scripting language for sequencing AxiDraw operations.

Scripts are run as batch files (`axilang script.axi`) or typed into an
interactive session (`axilang -i`).
"""

__version__ = '1.2.0'  # Dated 2023-10-02
