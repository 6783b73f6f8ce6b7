"""Business services returning ServiceResult."""
