"""
RewardStore - points-for-products employee rewards service
"""
