# Customer-facing messages shown by the storefront (Bengali)

PROMO_SAVE10_APPLIED = "১০% ডিসকাউন্ট অ্যাপ্লাই করা হয়েছে!"
PROMO_FLAT50_APPLIED = "৫০ টাকা ছাড় অ্যাপ্লাই করা হয়েছে!"
PROMO_EID2024_APPLIED = "ঈদ স্পেশাল ১৫% ডিসকাউন্ট!"
PROMO_INVALID = "দুঃখিত, এই প্রোমো কোডটি সঠিক নয়।"

ORDER_FAILED = "অর্ডার করতে সমস্যা হয়েছে। আবার চেষ্টা করুন।"
ORDERS_UNAVAILABLE = "অর্ডার লোড করতে সমস্যা হয়েছে"
COURIER_SENT = "কুরিয়ারে অর্ডার পাঠানো হয়েছে!"
COURIER_FAILED = "সমস্যা হয়েছে: "
