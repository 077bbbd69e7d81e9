"""
Business layer: inventory ledger, order aggregate rules and the order lifecycle engine
"""
