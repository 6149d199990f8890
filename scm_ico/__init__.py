"""SCM ICO - token ledger and crowdsale escrow.

An in-process model of a fixed-supply fungible token and a time- and
target-bounded crowdsale that sells it for wrapped ether, then releases the
purchased tokens to contributors after a hold period.
"""

__version__ = "0.1.0"
