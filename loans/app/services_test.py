"""Unit tests for loans/app/services.py."""

import unittest
import unittest.mock

import sqlalchemy.exc
import sqlmodel

from loans.app import database, errors, models, schemas, services


def make_loan(**overrides: object) -> schemas.LoanCreate:
    """Build a valid create request, with optional field overrides."""
    body: dict[str, object] = {
        'amount': 10000,
        'interestRate': 5.0,
        'term': 12,
        'extraPayment': 0,
        'result': {
            'monthlyPayment': 856.07,
            'totalInterest': 272.84,
            'payoffMonths': 12,
            'schedule': [{'month': 1, 'balance': 9143.93}],
        },
    }
    body.update(overrides)
    return schemas.LoanCreate.model_validate(body)


class _StoreTestBase(unittest.TestCase):
    """Base class providing an in-memory store and session per test."""

    def setUp(self) -> None:
        """Set up in-memory database and session for each test."""
        self.store = database.LoanStore.in_memory()
        self.store.create_tables()
        self.session = self.store.session()

    def tearDown(self) -> None:
        """Close session and store after each test."""
        self.session.close()
        self.store.close()

    def row_count(self) -> int:
        """Count stored rows through the listing operation."""
        return len(services.list_loans(self.session))


class TestCreateLoan(_StoreTestBase):
    """Tests for create_loan()."""

    def test_assigns_id(self) -> None:
        """The first loan gets id 1."""
        row = services.create_loan(self.session, make_loan())
        self.assertEqual(row.id, 1)

    def test_ids_increase(self) -> None:
        """Sequential creates get strictly increasing ids."""
        ids = [services.create_loan(self.session, make_loan()).id for _ in range(3)]
        self.assertEqual(ids, [1, 2, 3])

    def test_ids_not_reused_after_delete(self) -> None:
        """Ids of removed rows are never handed out again."""
        first = services.create_loan(self.session, make_loan())
        second = services.create_loan(self.session, make_loan())
        self.session.delete(second)
        self.session.commit()
        third = services.create_loan(self.session, make_loan())
        self.assertEqual(first.id, 1)
        self.assertEqual(third.id, 3)

    def test_stores_fields(self) -> None:
        """All scalar fields are written to the row."""
        row = services.create_loan(self.session, make_loan())
        self.assertEqual(row.amount, 10000)
        self.assertEqual(row.interest_rate, 5.0)
        self.assertEqual(row.term, 12)
        self.assertEqual(row.extra_payment, 0)
        self.assertEqual(row.monthly_payment, 856.07)
        self.assertEqual(row.total_interest, 272.84)
        self.assertEqual(row.payoff_months, 12)

    def test_schedule_stored_as_json_text(self) -> None:
        """The schedule column holds serialized JSON."""
        row = services.create_loan(self.session, make_loan())
        self.assertEqual(row.schedule, '[{"month": 1, "balance": 9143.93}]')

    def test_timestamp_captured_once(self) -> None:
        """The row is stamped from a single clock read."""
        with unittest.mock.patch.object(
            models, 'current_timestamp', return_value='2024-05-06T07:08:09.010Z'
        ) as clock:
            row = services.create_loan(self.session, make_loan())
        clock.assert_called_once_with()
        self.assertEqual(row.timestamp, '2024-05-06T07:08:09.010Z')

    def test_storage_failure_raises_classified_error(self) -> None:
        """A failing commit raises a StorageError and adds no row."""
        failure = sqlalchemy.exc.OperationalError(
            'INSERT INTO loans ...', {}, Exception('database is locked')
        )
        with unittest.mock.patch.object(self.session, 'commit', side_effect=failure):
            with self.assertRaises(errors.StorageBusyError):
                services.create_loan(self.session, make_loan())
        self.assertEqual(self.row_count(), 0)

    def test_missing_table_raises_unavailable(self) -> None:
        """Writing without a table raises StorageUnavailableError."""
        sqlmodel.SQLModel.metadata.drop_all(self.store.engine)
        with self.assertRaises(errors.StorageUnavailableError):
            services.create_loan(self.session, make_loan())

    def test_oversized_integer_raises_data_error(self) -> None:
        """An integer too large for SQLite fails as a data error and rolls back."""
        loan = make_loan()
        loan.term = 10**30
        with self.assertRaises(errors.StorageDataError):
            services.create_loan(self.session, loan)
        self.assertEqual(self.row_count(), 0)

    def test_unserializable_schedule_raises_data_error(self) -> None:
        """A schedule that cannot be serialized is rejected before writing."""
        loan = make_loan()
        loan.result.schedule = [object()]
        with self.assertRaises(errors.StorageDataError):
            services.create_loan(self.session, loan)
        self.assertEqual(self.row_count(), 0)


class TestListLoans(_StoreTestBase):
    """Tests for list_loans()."""

    def test_empty(self) -> None:
        """An empty table lists nothing."""
        self.assertEqual(services.list_loans(self.session), [])
        self.assertEqual(self.row_count(), 0)

    def test_lists_each_loan_once(self) -> None:
        """N creates list N rows with distinct ids."""
        for _ in range(4):
            services.create_loan(self.session, make_loan())
        rows = services.list_loans(self.session)
        self.assertEqual(len(rows), 4)
        self.assertEqual(sorted(row.id for row in rows), [1, 2, 3, 4])  # type: ignore[type-var]
        self.assertEqual(self.row_count(), 4)

    def test_missing_table_raises_unavailable(self) -> None:
        """Reading without a table raises StorageUnavailableError."""
        sqlmodel.SQLModel.metadata.drop_all(self.store.engine)
        with self.assertRaises(errors.StorageUnavailableError):
            services.list_loans(self.session)


class TestToRecord(unittest.TestCase):
    """Tests for to_record()."""

    def test_nests_result_fields(self) -> None:
        """Computed fields are nested under result and schedule is decoded."""
        row = models.Loan(
            id=7,
            amount=250000.0,
            interest_rate=6.5,
            term=360,
            extra_payment=100.0,
            monthly_payment=1580.17,
            total_interest=318861.2,
            payoff_months=300,
            timestamp='2024-01-01T00:00:00.000Z',
            schedule='[{"month": 1, "principal": 226.0}]',
        )
        record = services.to_record(row)
        self.assertEqual(
            record.model_dump(by_alias=True),
            {
                'id': 7,
                'amount': 250000.0,
                'interestRate': 6.5,
                'term': 360,
                'extraPayment': 100.0,
                'result': {
                    'monthlyPayment': 1580.17,
                    'totalInterest': 318861.2,
                    'payoffMonths': 300,
                    'schedule': [{'month': 1, 'principal': 226.0}],
                },
                'timestamp': '2024-01-01T00:00:00.000Z',
            },
        )

    def test_null_columns_pass_through(self) -> None:
        """Rows with NULL columns (including schedule) are still readable."""
        record = services.to_record(models.Loan(id=1))
        self.assertIsNone(record.amount)
        self.assertIsNone(record.result.schedule)
        self.assertIsNone(record.timestamp)

    def test_unreadable_schedule_raises_data_error(self) -> None:
        """Corrupt schedule text is reported as a storage data error."""
        with self.assertRaises(errors.StorageDataError):
            services.to_record(models.Loan(id=1, schedule='{not json'))


if __name__ == '__main__':
    unittest.main()
