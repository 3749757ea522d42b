from typing import Sequence, Union

from model.FederalResult import FederalResult
from tax.TaxReference import FilingStatus, TaxBracket, TaxReference


def marginal_bracket_tax(income: float, brackets: Sequence[TaxBracket]) -> float:
	"""Tax income through an ordered, contiguous bracket table.

	Each bracket taxes the slice of income inside [min, max) at its rate.
	The walk stops at the bracket that contains the top of income.
	"""
	if income <= 0:
		return 0.0
	tax = 0.0
	for b in brackets:
		if income > b.min:
			tax += (min(income, b.max) - b.min) * b.rate
		if income <= b.max:
			break
	return tax


def bracket_rate_at(income: float, brackets: Sequence[TaxBracket]) -> float:
	for b in brackets:
		if b.contains(income):
			return b.rate
	return 0.0


class FederalDetails:
	def __init__(self, reference: TaxReference):
		"""
		reference: loaded TaxReference shared read-only with the other calculators
		"""
		self.reference = reference

	def standardDeduction(self, filing_status: Union[str, FilingStatus]) -> float:
		return self.reference.filing_status(filing_status).standard_deduction

	def ordinaryTax(self, taxable_income: float, filing_status: Union[str, FilingStatus]) -> float:
		"""
		Returns the federal tax on ordinary taxable income (already net of the
		standard deduction). Zero or negative income owes nothing.
		"""
		return marginal_bracket_tax(taxable_income, self.reference.filing_status(filing_status).brackets)

	def marginalRate(self, taxable_income: float, filing_status: Union[str, FilingStatus]) -> float:
		return bracket_rate_at(taxable_income, self.reference.filing_status(filing_status).brackets)

	def longTermCapitalGainsTax(self, ordinary_taxable_income: float, ltcg_amount: float,
								filing_status: Union[str, FilingStatus]) -> float:
		"""
		Calculates the federal tax on long-term capital gains.

		KEY CONCEPT - "STACKING":
		LTCG is "stacked on top of" ordinary taxable income. Ordinary income
		fills the bottom of the capital gains brackets first, then the gains
		fill whatever room is left, bracket by bracket.

		EXAMPLE (single filer, 0% up to $47,025, 15% up to $518,900):
		- Ordinary taxable income: $0
		- Long-term capital gains: $60,000
		- $47,025 lands in the 0% bracket
		- $12,975 lands in the 15% bracket = $1,946.25

		Args:
			ordinary_taxable_income: Ordinary income after the standard deduction.
			                         This is where the gains start stacking.
			ltcg_amount: Long-term capital gains withdrawn
			filing_status: Filing status used to pick the capital gains brackets

		Returns:
			The federal tax owed on the long-term capital gains
		"""
		if ltcg_amount <= 0:
			return 0.0

		brackets = self.reference.filing_status(filing_status).capital_gains_brackets
		ltcg_tax = 0.0
		remaining_ltcg = ltcg_amount
		current_income = ordinary_taxable_income

		for b in brackets:
			# Brackets already filled by ordinary income take no gains
			if current_income < b.max:
				room = b.max - current_income
				taxable_in_bracket = min(remaining_ltcg, room)
				ltcg_tax += taxable_in_bracket * b.rate
				remaining_ltcg -= taxable_in_bracket
				current_income += taxable_in_bracket
			if remaining_ltcg <= 0:
				break

		return ltcg_tax

	def taxBurden(self, ordinary_income: float, ltcg_amount: float,
				  filing_status: Union[str, FilingStatus]) -> FederalResult:
		"""
		Returns a FederalResult for gross ordinary income and long-term gains.
		The standard deduction is applied to ordinary income only.
		"""
		taxable_ordinary = max(0.0, ordinary_income - self.standardDeduction(filing_status))
		return FederalResult(
			taxableOrdinaryIncome=taxable_ordinary,
			ordinaryTax=self.ordinaryTax(taxable_ordinary, filing_status),
			longTermCapitalGainsTax=self.longTermCapitalGainsTax(taxable_ordinary, ltcg_amount, filing_status),
			marginalBracket=self.marginalRate(taxable_ordinary, filing_status),
		)
