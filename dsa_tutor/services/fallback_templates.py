"""
Canned instructional replies used by the fallback responder.

Each constant is returned verbatim when its rule matches, so edits here change
user-visible output.
"""

BINARY_SEARCH_TREE = """**Binary Search Tree (BST) - Comprehensive Guide**

A Binary Search Tree is a hierarchical data structure where each node has at most two children, arranged so that:

**🔑 Key Properties:**
• **Left child** < **Parent** < **Right child**
• All values in left subtree < parent value
• All values in right subtree > parent value
• No duplicate values (in standard BST)

**⚡ Time Complexities:**
• **Search**: O(log n) average, O(n) worst case
• **Insert**: O(log n) average, O(n) worst case
• **Delete**: O(log n) average, O(n) worst case

**💻 Basic Implementation (Python):**
```python
class TreeNode:
    def __init__(self, val):
        self.val = val
        self.left = None
        self.right = None


class BST:
    def __init__(self):
        self.root = None

    def insert(self, val):
        self.root = self._insert(self.root, val)

    def _insert(self, node, val):
        if node is None:
            return TreeNode(val)
        if val < node.val:
            node.left = self._insert(node.left, val)
        elif val > node.val:
            node.right = self._insert(node.right, val)
        return node

    def search(self, val):
        node = self.root
        while node is not None and node.val != val:
            node = node.left if val < node.val else node.right
        return node
```

**🌟 Common Applications:**
• Database indexing
• Expression parsing
• File systems
• Priority queues

Would you like me to explain BST traversals or balancing techniques?"""


TIME_COMPLEXITY = """**Time Complexity - Complete Guide**

Time complexity measures how an algorithm's runtime grows with input size.

**📊 Common Time Complexities (Best to Worst):**

**O(1) - Constant Time:**
• Array access: `arr[index]`
• Hash table lookup
• Stack push/pop

**O(log n) - Logarithmic Time:**
• Binary search in sorted array
• Balanced tree operations
• Heap insert/delete

**O(n) - Linear Time:**
• Array traversal
• Linear search
• Finding min/max in unsorted array

**O(n log n) - Linearithmic Time:**
• Merge sort
• Heap sort
• Efficient sorting algorithms

**O(n²) - Quadratic Time:**
• Bubble sort
• Selection sort
• Nested loops over same data

**O(2^n) - Exponential Time:**
• Recursive Fibonacci (naive)
• Subset generation
• Traveling salesman (brute force)

**🎯 Analysis Tips:**
1. **Focus on dominant term**: O(n² + n) → O(n²)
2. **Ignore constants**: O(3n) → O(n)
3. **Consider worst case** unless specified otherwise
4. **Count basic operations** in loops and recursion

**💡 Example Analysis:**
```python
# O(n²) - nested loops
for i in range(n):
    for j in range(n):
        pass  # O(1) operation


# O(n log n) - divide and conquer
def merge_sort(arr):
    if len(arr) <= 1:
        return arr
    mid = len(arr) // 2
    left = merge_sort(arr[:mid])    # T(n/2)
    right = merge_sort(arr[mid:])   # T(n/2)
    return merge(left, right)       # O(n)
```

What specific algorithm would you like me to analyze?"""


MERGE_SORT = """**Merge Sort - Divide & Conquer Algorithm**

Merge Sort is one of the most efficient and stable sorting algorithms.

**🎯 How It Works:**
1. **Divide**: Split array into two halves
2. **Conquer**: Recursively sort both halves
3. **Combine**: Merge sorted halves back together

**⚡ Time & Space Complexity:**
• **Time**: O(n log n) in all cases (best, average, worst)
• **Space**: O(n) for temporary arrays
• **Stable**: Maintains relative order of equal elements

**💻 Implementation (Python):**
```python
def merge_sort(arr):
    if len(arr) <= 1:
        return arr

    mid = len(arr) // 2
    left = merge_sort(arr[:mid])
    right = merge_sort(arr[mid:])
    return merge(left, right)


def merge(left, right):
    result = []
    i = j = 0
    while i < len(left) and j < len(right):
        if left[i] <= right[j]:
            result.append(left[i])
            i += 1
        else:
            result.append(right[j])
            j += 1
    result.extend(left[i:])
    result.extend(right[j:])
    return result


print(merge_sort([64, 34, 25, 12, 22, 11, 90]))
```

**🌟 Advantages:**
• Guaranteed O(n log n) performance
• Stable sorting algorithm
• Works well with large datasets
• Predictable performance

**⚠️ Disadvantages:**
• Requires O(n) extra space
• Not in-place sorting
• Slower than quicksort for small arrays

**🔄 Step-by-Step Example:**
```
[38, 27, 43, 3, 9, 82, 10]
       ↓ Divide
[38, 27, 43]    [3, 9, 82, 10]
       ↓ Divide further
[38] [27, 43]   [3, 9] [82, 10]
       ↓ Merge back
[27, 38, 43]    [3, 9, 10, 82]
       ↓ Final merge
[3, 9, 10, 27, 38, 43, 82]
```

Would you like to see other sorting algorithms or learn about merge sort optimizations?"""


ARRAYS_VS_LINKED_LISTS = """**Arrays vs Linked Lists - Comprehensive Comparison**

Understanding the differences helps choose the right data structure for your needs.

**📊 Arrays**

**Structure:**
• Elements stored in contiguous memory locations
• Fixed size (in most languages)
• Direct access via index

**⚡ Time Complexities:**
• **Access**: O(1) - Direct indexing
• **Search**: O(n) - Linear search, O(log n) if sorted
• **Insert**: O(n) - Need to shift elements
• **Delete**: O(n) - Need to shift elements

**🔗 Linked Lists**

**Structure:**
• Elements (nodes) scattered in memory
• Each node contains data + pointer to next node
• Dynamic size

**⚡ Time Complexities:**
• **Access**: O(n) - Must traverse from head
• **Search**: O(n) - Linear traversal
• **Insert**: O(1) - If you have the position
• **Delete**: O(1) - If you have the position

**💻 Linked List Example (Python):**
```python
class ListNode:
    def __init__(self, val):
        self.val = val
        self.next = None


class LinkedList:
    def __init__(self):
        self.head = None

    def prepend(self, val):  # O(1)
        node = ListNode(val)
        node.next = self.head
        self.head = node

    def append(self, val):  # O(n)
        node = ListNode(val)
        if self.head is None:
            self.head = node
            return
        current = self.head
        while current.next:
            current = current.next
        current.next = node
```

**⚖️ When to Use What:**

**Use Arrays When:**
• You need random access to elements
• Memory usage is a concern
• You do more reading than inserting/deleting

**Use Linked Lists When:**
• Frequent insertions/deletions at beginning
• Size varies significantly
• You don't need random access
• Implementing other data structures (stacks, queues)

**📈 Memory Comparison:**
• **Array**: Contiguous memory, better cache performance
• **Linked List**: Scattered memory, extra space for pointers

**🎯 Real-World Examples:**
• **Arrays**: Image pixels, mathematical matrices, lookup tables
• **Linked Lists**: Browser history, music playlists, undo functionality

Would you like to explore specific operations or see implementations of other data structures?"""


SIEVE_OF_ERATOSTHENES = """**Sieve of Eratosthenes - Prime Number Algorithm**

The Sieve of Eratosthenes is an ancient, efficient algorithm for finding all prime numbers up to a given limit.

**🎯 How It Works:**
1. **Create a list** of consecutive integers from 2 through n
2. **Mark multiples** of each prime starting from 2
3. **Remaining unmarked** numbers are prime

**⚡ Time & Space Complexity:**
• **Time**: O(n log log n)
• **Space**: O(n) to track prime status

**💻 Implementation (Python):**
```python
def sieve_of_eratosthenes(n):
    is_prime = [True] * (n + 1)
    is_prime[0] = is_prime[1] = False

    i = 2
    while i * i <= n:
        if is_prime[i]:
            for j in range(i * i, n + 1, i):
                is_prime[j] = False
        i += 1

    return [i for i in range(2, n + 1) if is_prime[i]]


print(sieve_of_eratosthenes(30))
# [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]
```

**🌟 Key Optimizations:**
• **Start from i²**: Multiples below i² are already marked
• **Skip even numbers**: Only check odd numbers after 2
• **Early termination**: Stop at √n

**🎯 Applications:**
• Cryptography (RSA key generation)
• Prime factorization
• Mathematical competitions

**⚖️ Comparison with Other Methods:**
• **Trial Division**: O(n√n) - Much slower
• **Segmented Sieve**: Better for very large ranges

Would you like to see optimized versions or other prime-finding algorithms?"""


DYNAMIC_PROGRAMMING = """**Dynamic Programming - Optimization Technique**

Dynamic Programming (DP) is a method for solving complex problems by breaking them down into simpler subproblems.

**🎯 Core Principles:**
1. **Optimal Substructure**: Optimal solution contains optimal solutions to subproblems
2. **Overlapping Subproblems**: Same subproblems solved multiple times
3. **Memoization**: Store results to avoid recomputation

**⚡ Time & Space Complexity:**
• **Time**: Usually polynomial instead of exponential
• **Space**: O(n) to O(n²) for the memo table
• **Trade-off**: Space for time efficiency

**💻 Classic Example - Fibonacci:**
```python
from functools import lru_cache


def fib_naive(n):  # O(2^n)
    if n <= 1:
        return n
    return fib_naive(n - 1) + fib_naive(n - 2)


@lru_cache(maxsize=None)
def fib_memo(n):  # O(n) time, O(n) space
    if n <= 1:
        return n
    return fib_memo(n - 1) + fib_memo(n - 2)


def fib_optimal(n):  # O(n) time, O(1) space
    prev, curr = 0, 1
    for _ in range(n):
        prev, curr = curr, prev + curr
    return prev
```

**🏆 Coin Change:**
```python
def coin_change(coins, amount):
    dp = [float("inf")] * (amount + 1)
    dp[0] = 0
    for i in range(1, amount + 1):
        for coin in coins:
            if coin <= i:
                dp[i] = min(dp[i], dp[i - coin] + 1)
    return -1 if dp[amount] == float("inf") else dp[amount]
```

**🎯 DP Patterns:**
• **Linear DP**: 1D problems (Fibonacci, Climbing Stairs)
• **Grid DP**: 2D problems (Unique Paths, Edit Distance)
• **Interval DP**: Range problems (Matrix Chain Multiplication)
• **Tree DP**: Tree-based problems (House Robber III)

**🔍 How to Identify DP Problems:**
1. **Optimization**: Find minimum/maximum value
2. **Counting**: Count number of ways
3. **Decision Making**: Yes/No feasibility
4. **Overlapping subproblems** present

Would you like to explore specific DP patterns or see more examples?"""


COMPLEXITY_DETAIL_FOLLOWUP = """Let me break down Time and Space Complexity in detail:

**Time Complexity Examples:**
• O(1) - Constant: Accessing array element by index: arr[5]
• O(log n) - Logarithmic: Binary search in sorted array
• O(n) - Linear: Finding max element in unsorted array
• O(n log n) - Linearithmic: Merge sort, heap sort
• O(n²) - Quadratic: Bubble sort, nested loops
• O(2^n) - Exponential: Recursive Fibonacci (naive approach)

**Space Complexity Examples:**
• O(1) - Constant: Variables that don't grow with input
• O(n) - Linear: Creating array copy, recursive call stack
• O(n²) - Quadratic: 2D matrix of size n×n

**Analysis Tips:**
1. Count the dominant operations
2. Ignore constants and lower-order terms
3. Consider worst-case scenarios
4. Analyze both iterative and recursive solutions

Would you like me to analyze a specific algorithm's complexity?"""


COMPLEXITY_EXAMPLES_FOLLOWUP = """Here are practical examples of different complexities:

**O(1) - Constant Time:**
```python
def get_first_element(arr):
    return arr[0]  # Always takes same time
```

**O(n) - Linear Time:**
```python
def find_max(arr):
    max_val = arr[0]
    for num in arr:  # Visits each element once
        if num > max_val:
            max_val = num
    return max_val
```

**O(n²) - Quadratic Time:**
```python
def bubble_sort(arr):
    n = len(arr)
    for i in range(n):          # Outer loop: n times
        for j in range(n - 1):  # Inner loop: n times
            if arr[j] > arr[j + 1]:
                arr[j], arr[j + 1] = arr[j + 1], arr[j]
```

**O(log n) - Logarithmic Time:**
```python
def binary_search(arr, target):
    left, right = 0, len(arr) - 1
    while left <= right:
        mid = (left + right) // 2
        if arr[mid] == target:
            return mid
        elif arr[mid] < target:
            left = mid + 1
        else:
            right = mid - 1
    return -1
```

Which complexity would you like to explore further?"""


GENERAL_DSA = """**DSA Learning Assistant - Offline Mode**

I'm currently running in offline mode, providing DSA explanations without the full AI service.

**🎯 What I Can Help You With:**

**📚 Core Topics Available:**
• **Data Structures**: Arrays, Linked Lists, Stacks, Queues, Trees, Graphs, Hash Tables
• **Algorithms**: Sorting, Searching, Dynamic Programming, Greedy, Divide & Conquer
• **Analysis**: Time/Space Complexity, Big O Notation, Algorithm Optimization

**💡 Try These Specific Questions:**
• "What is a binary search tree?"
• "Explain time complexity"
• "How does merge sort work?"
• "What's the difference between arrays and linked lists?"
• "What is dynamic programming?"
• "Explain the sieve of Eratosthenes"

**🎓 Learning Approach:**
- Clear conceptual understanding
- Practical implementation details
- Performance analysis
- Common pitfalls and optimizations

**Ask me about any DSA topic and I'll provide a comprehensive explanation!**"""


GENERIC_REDIRECTS = (
    "I'm a DSA (Data Structures & Algorithms) learning assistant. Could you ask me about algorithms, data structures, or programming concepts?",
    "I specialize in DSA education. What data structure or algorithm would you like to learn about?",
    "I'm here to help with Data Structures and Algorithms. Try asking about sorting, searching, trees, graphs, or complexity analysis!",
)
