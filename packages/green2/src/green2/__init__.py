from __future__ import annotations

from ._addresses import (
    ADDRESS_COLUMNS as ADDRESS_COLUMNS,
    create_address_dataframe as create_address_dataframe,
    generate_address_data as generate_address_data,
    generate_birthday_data as generate_birthday_data,
    load_nicknames as load_nicknames,
    members_with_birthday as members_with_birthday,
    salutation as salutation,
)
from ._columns import (
    MEMBER_TABLE as MEMBER_TABLE,
    NICKNAME_TABLE as NICKNAME_TABLE,
    ColumnDescriptor as ColumnDescriptor,
    ColumnKind as ColumnKind,
    Table as Table,
    parse_cell as parse_cell,
)
from ._config import (
    CONFIG_ENV as CONFIG_ENV,
    Config as Config,
)
from ._context import Green2Context as Green2Context
from ._errors import (
    DuplicateMemberError as DuplicateMemberError,
    GroupingInputError as GroupingInputError,
    OriginatorError as OriginatorError,
    PipelineError as PipelineError,
    RowDataWarning as RowDataWarning,
    SchemaMismatchError as SchemaMismatchError,
)
from ._grouping import (
    ExcludedMember as ExcludedMember,
    Grouping as Grouping,
    PaymentGroup as PaymentGroup,
    exclusion_reasons as exclusion_reasons,
    group_members as group_members,
)
from ._identifiers import (
    UNIQUE_DAYS_MESSAGE_ID as UNIQUE_DAYS_MESSAGE_ID,
    UNIQUE_MONTHS_PMT_INF_ID as UNIQUE_MONTHS_PMT_INF_ID,
    format_sepa_date as format_sepa_date,
    is_valid_bic as is_valid_bic,
    is_valid_creditor_id as is_valid_creditor_id,
    is_valid_iban as is_valid_iban,
    is_valid_message_id as is_valid_message_id,
    is_valid_pmt_inf_id as is_valid_pmt_inf_id,
    normalize_iban as normalize_iban,
    parse_sepa_date as parse_sepa_date,
)
from ._members import (
    MemberExtraction as MemberExtraction,
    build_member as build_member,
    load_members as load_members,
)
from ._originator import Originator as Originator
from ._pain import (
    PAIN_008_003_02 as PAIN_008_003_02,
    PainMessage as PainMessage,
    assemble_document as assemble_document,
)
from ._people import (
    AccountHolder as AccountHolder,
    Address as Address,
    Member as Member,
    Person as Person,
)
from ._query_result import (
    NULL_STRINGS as NULL_STRINGS,
    check_query_result as check_query_result,
    load_query_result as load_query_result,
    query_result_from_dataframe as query_result_from_dataframe,
)
from ._schema import (
    SchemaMapping as SchemaMapping,
    map_columns as map_columns,
)
from ._selection import (
    all_of as all_of,
    any_of as any_of,
    has_mandate as has_mandate,
    has_valid_iban as has_valid_iban,
    is_active as is_active,
    is_contribution_free as is_contribution_free,
    membership_number_in as membership_number_in,
    negate as negate,
)
from ._sepa_direct_debit import (
    MEMBER_QUERY as MEMBER_QUERY,
    CollectionResult as CollectionResult,
    generate_collection as generate_collection,
    generate_collection_from_source as generate_collection_from_source,
)
from ._types import (
    DuplicatePolicy as DuplicatePolicy,
    SequenceType as SequenceType,
)
from ._util import (
    amount_to_cents as amount_to_cents,
    console_confirm as console_confirm,
    format_cents as format_cents,
    format_cents_as_eur_de as format_cents_as_eur_de,
    to_date_or_none as to_date_or_none,
)


__all__ = [
    "ADDRESS_COLUMNS",
    "CONFIG_ENV",
    "MEMBER_QUERY",
    "MEMBER_TABLE",
    "NICKNAME_TABLE",
    "NULL_STRINGS",
    "PAIN_008_003_02",
    "UNIQUE_DAYS_MESSAGE_ID",
    "UNIQUE_MONTHS_PMT_INF_ID",
    #
    "AccountHolder",
    "Address",
    "CollectionResult",
    "ColumnDescriptor",
    "ColumnKind",
    "Config",
    "DuplicateMemberError",
    "DuplicatePolicy",
    "ExcludedMember",
    "Green2Context",
    "Grouping",
    "GroupingInputError",
    "Member",
    "MemberExtraction",
    "Originator",
    "OriginatorError",
    "PainMessage",
    "PaymentGroup",
    "Person",
    "PipelineError",
    "RowDataWarning",
    "SchemaMapping",
    "SchemaMismatchError",
    "SequenceType",
    "Table",
    "all_of",
    "amount_to_cents",
    "any_of",
    "assemble_document",
    "build_member",
    "check_query_result",
    "console_confirm",
    "create_address_dataframe",
    "exclusion_reasons",
    "format_cents",
    "format_cents_as_eur_de",
    "format_sepa_date",
    "generate_address_data",
    "generate_birthday_data",
    "generate_collection",
    "generate_collection_from_source",
    "group_members",
    "has_mandate",
    "has_valid_iban",
    "is_active",
    "is_contribution_free",
    "is_valid_bic",
    "is_valid_creditor_id",
    "is_valid_iban",
    "is_valid_message_id",
    "is_valid_pmt_inf_id",
    "load_members",
    "load_nicknames",
    "load_query_result",
    "map_columns",
    "members_with_birthday",
    "membership_number_in",
    "negate",
    "normalize_iban",
    "parse_cell",
    "parse_sepa_date",
    "query_result_from_dataframe",
    "salutation",
    "to_date_or_none",
]
