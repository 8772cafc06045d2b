"""Pydantic schemas for users and authentication."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class User(BaseModel):
    """A user directory document.

    Field aliases match the attribute names stored in the user collection.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="$id")
    user_id: str = Field(alias="userId")
    email: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    address1: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = Field(default=None, alias="postalCode")
    date_of_birth: str | None = Field(default=None, alias="dateOfBirth")
    ssn: str | None = Field(default=None, exclude=True)
    dwolla_customer_id: str | None = Field(default=None, alias="dwollaCustomerId")
    dwolla_customer_url: str | None = Field(default=None, alias="dwollaCustomerUrl")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class SignInParams(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class SignUpParams(BaseModel):
    """Sign-up form. Everything but the password ends up in the user document."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName", min_length=1)
    last_name: str = Field(alias="lastName", min_length=1)
    address1: str
    city: str
    state: str = Field(min_length=2, max_length=2)
    postal_code: str = Field(alias="postalCode")
    date_of_birth: str = Field(alias="dateOfBirth")
    ssn: str
    email: EmailStr
    password: str = Field(min_length=8)

    def profile_fields(self) -> dict:
        """Profile attributes keyed by their document names (no password)."""
        return self.model_dump(by_alias=True, exclude={"password"})

    def dwolla_customer_fields(self) -> dict:
        """Fields for a Dwolla personal verified customer."""
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": str(self.email),
            "type": "personal",
            "address1": self.address1,
            "city": self.city,
            "state": self.state,
            "postalCode": self.postal_code,
            "dateOfBirth": self.date_of_birth,
            "ssn": self.ssn,
        }
