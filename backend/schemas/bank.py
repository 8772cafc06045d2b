"""Pydantic schemas for locally stored bank-account records."""

from pydantic import BaseModel, ConfigDict, Field


class BankAccountCreate(BaseModel):
    """Fields of a new bank record, produced by a successful link handshake."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    bank_id: str = Field(alias="bankId")
    account_id: str = Field(alias="accountId")
    access_token: str = Field(alias="accessToken")
    funding_source_url: str = Field(alias="fundingSourceUrl")
    shareable_id: str = Field(alias="sharableId")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class BankAccount(BankAccountCreate):
    """A bank document as stored in the bank collection."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="$id")


class BankAccountResponse(BaseModel):
    """Bank record as exposed over the API (no access token)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="$id")
    user_id: str = Field(alias="userId")
    bank_id: str = Field(alias="bankId")
    account_id: str = Field(alias="accountId")
    funding_source_url: str = Field(alias="fundingSourceUrl")
    shareable_id: str = Field(alias="sharableId")

    @classmethod
    def from_bank(cls, bank: BankAccount) -> "BankAccountResponse":
        return cls(
            id=bank.id,
            user_id=bank.user_id,
            bank_id=bank.bank_id,
            account_id=bank.account_id,
            funding_source_url=bank.funding_source_url,
            shareable_id=bank.shareable_id,
        )
