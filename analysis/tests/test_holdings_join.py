"""
Tests for the holdings join stage.
"""

import math
from datetime import date

import pandas as pd

from analysis.holdings_join import build_joined_rows, load_joined_rows, JOINED_COLUMNS


def _raw_row(ticker, row_date, value, account_id=10, quantity=10.0, asset_class='equity'):
    return {
        'customer_id': 1, 'full_name': 'Ada Byron', 'account_open_date': '2018-03-01',
        'account_id': account_id, 'major_asset_class': asset_class,
        'minor_asset_class': None, 'ticker': ticker, 'security_name': ticker,
        'quantity': quantity, 'date': row_date, 'value': value,
    }


class TestBuildJoinedRows:
    """Tests for build_joined_rows."""

    def test_prior_value_is_row_lag(self):
        """Test prior_value is the previous row's value, ignoring calendar gaps."""
        raw = pd.DataFrame([
            _raw_row('VTI', date(2024, 1, 2), 100.0),
            _raw_row('VTI', date(2024, 1, 5), 102.0),  # three-day gap
            _raw_row('VTI', date(2024, 1, 8), 101.0),  # weekend gap
        ])

        joined = build_joined_rows(raw)

        assert math.isnan(joined['prior_value'].iloc[0])
        assert joined['prior_value'].iloc[1:].tolist() == [100.0, 102.0]

    def test_unsorted_input_is_ordered(self):
        """Test lag is computed after sorting each ticker by date."""
        raw = pd.DataFrame([
            _raw_row('VTI', date(2024, 1, 4), 104.0),
            _raw_row('GLD', date(2024, 1, 3), 51.0),
            _raw_row('VTI', date(2024, 1, 2), 100.0),
            _raw_row('GLD', date(2024, 1, 2), 50.0),
            _raw_row('VTI', date(2024, 1, 3), 102.0),
        ])

        joined = build_joined_rows(raw)
        vti = joined[joined['ticker'] == 'VTI']

        assert vti['date'].tolist() == [date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 4)]
        assert vti['prior_value'].tolist()[1:] == [100.0, 102.0]

        gld = joined[joined['ticker'] == 'GLD']
        assert math.isnan(gld['prior_value'].iloc[0])
        assert gld['prior_value'].iloc[1] == 50.0

    def test_lag_does_not_cross_tickers(self):
        """Test each ticker's first row has no prior_value."""
        raw = pd.DataFrame([
            _raw_row('AAA', date(2024, 1, 2), 10.0),
            _raw_row('BBB', date(2024, 1, 3), 20.0),
        ])

        joined = build_joined_rows(raw)

        assert joined['prior_value'].isna().all()

    def test_same_ticker_in_two_accounts(self):
        """Test holdings of one ticker in two accounts share the prior_value."""
        raw = pd.DataFrame([
            _raw_row('VTI', date(2024, 1, 2), 100.0, account_id=10),
            _raw_row('VTI', date(2024, 1, 2), 100.0, account_id=11, quantity=5.0),
            _raw_row('VTI', date(2024, 1, 3), 102.0, account_id=10),
            _raw_row('VTI', date(2024, 1, 3), 102.0, account_id=11, quantity=5.0),
        ])

        joined = build_joined_rows(raw)
        second_day = joined[joined['date'] == date(2024, 1, 3)]

        assert second_day['prior_value'].tolist() == [100.0, 100.0]
        assert joined[joined['date'] == date(2024, 1, 2)]['prior_value'].isna().all()

    def test_position_value(self):
        """Test position_value = quantity x value."""
        raw = pd.DataFrame([_raw_row('VTI', date(2024, 1, 2), 100.0, quantity=12.5)])

        joined = build_joined_rows(raw)

        assert joined['position_value'].iloc[0] == 1250.0

    def test_asset_class_normalized(self):
        """Test raw labels are normalized on every row."""
        raw = pd.DataFrame([
            _raw_row('VTI', date(2024, 1, 2), 100.0, asset_class='equty'),
            _raw_row('BND', date(2024, 1, 2), 80.0, asset_class='fixed income corporate'),
            _raw_row('VNQ', date(2024, 1, 2), 90.0, asset_class='Real Estate'),
        ])

        joined = build_joined_rows(raw).set_index('ticker')

        assert joined.loc['VTI', 'major_asset_class'] == 'equity'
        assert joined.loc['BND', 'major_asset_class'] == 'fixed_income'
        assert joined.loc['VNQ', 'major_asset_class'] == 'Real Estate'

    def test_custom_aliases(self):
        """Test a supplied alias table is used."""
        raw = pd.DataFrame([_raw_row('VNQ', date(2024, 1, 2), 90.0, asset_class='Real Estate')])

        joined = build_joined_rows(raw, aliases={'real estate': 'alternatives'})

        assert joined['major_asset_class'].iloc[0] == 'alternatives'

    def test_empty(self):
        """Test empty input keeps the schema."""
        joined = build_joined_rows(pd.DataFrame())

        assert joined.empty
        assert list(joined.columns) == JOINED_COLUMNS


class TestLoadJoinedRows:
    """Tests for load_joined_rows against the seeded store."""

    def test_seeded_customer(self, seeded_store):
        """Test end-to-end join for customer 1."""
        joined = load_joined_rows(seeded_store, [1], date(2024, 1, 2), date(2024, 1, 8), 'adj_close')

        assert list(joined.columns) == JOINED_COLUMNS
        assert set(joined['ticker']) == {'VTI', 'GLD', 'BND', 'QAI'}
        assert set(joined['major_asset_class']) == {'equity', 'commodities', 'fixed_income', 'alternatives'}

        # 5 dates x (VTI in 2 accounts + GLD + BND) + 1 QAI row
        assert len(joined) == 5 * 4 + 1

    def test_per_ticker_ordering_invariant(self, seeded_store):
        """Test prior_value(date[i]) == value(date[i-1]) within each ticker."""
        joined = load_joined_rows(seeded_store, [1], date(2024, 1, 2), date(2024, 1, 8), 'adj_close')

        for _, group in joined.drop_duplicates(['ticker', 'date']).groupby('ticker'):
            dates = group['date'].tolist()
            assert dates == sorted(dates)
            assert len(set(dates)) == len(dates)
            assert group['prior_value'].iloc[1:].tolist() == group['value'].iloc[:-1].tolist()

    def test_window_start_has_no_prior(self, seeded_store):
        """Test the out-of-window price is not used as a prior value."""
        joined = load_joined_rows(seeded_store, [2], date(2024, 1, 2), date(2024, 1, 8), 'adj_close')

        assert math.isnan(joined['prior_value'].iloc[0])
