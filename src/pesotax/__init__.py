"""PesoTax progressive tax calculation engine."""
